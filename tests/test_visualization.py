from datetime import datetime

from sql_dump_der.der.er_model import Schema, build_schema
from sql_dump_der.der.visualization import render_documents, render_mermaid

GENERATED_AT = datetime(2024, 1, 2, 3, 4, 5)


def test_render_mermaid_ord_example(emp_ord_sql):
    diagram = render_mermaid(build_schema(emp_ord_sql))

    assert diagram == (
        'erDiagram\n'
        '    ORD {\n'
        '        NUMBER ID\n'
        '        NUMBER EMP_ID\n'
        '    }\n'
        '\n'
        '    EMP {\n'
        '        NUMBER ID PK\n'
        '        STRING NAME "NOT NULL"\n'
        '    }\n'
        '\n'
        '    ORD ||--o{ EMP : "references"\n'
    )


def test_render_mermaid_leaves_out_dangling_relationships():
    schema = build_schema(
        "CREATE TABLE A (ID NUMBER, B_ID NUMBER, CONSTRAINT FK FOREIGN KEY (B_ID) REFERENCES B (ID));"
    )

    assert len(schema.relationships) == 1
    assert '||--o{' not in render_mermaid(schema)


def test_single_document(emp_ord_sql):
    documents = render_documents(build_schema(emp_ord_sql), 'der', 'dump.sql', GENERATED_AT)

    assert len(documents) == 1
    document = documents[0]
    assert document.filename == 'der.md'
    assert '**Generated:** 2024-01-02 03:04:05' in document.content
    assert '**Source file:** dump.sql' in document.content
    assert '**Tables found:** 2' in document.content
    assert '**Relationships found:** 1' in document.content
    assert '```mermaid\nerDiagram\n' in document.content
    assert '| ID | NUMBER | PK |' in document.content
    assert '| NAME | STRING | NOT NULL |' in document.content
    assert '| ORD | EMP_ID | EMP | ID |' in document.content


def test_single_document_lists_dangling_relationship_in_table_only():
    schema = build_schema(
        "CREATE TABLE A (ID NUMBER, B_ID NUMBER, CONSTRAINT FK FOREIGN KEY (B_ID) REFERENCES B (ID));"
    )

    content = render_documents(schema, 'der', 'dump.sql', GENERATED_AT)[0].content

    assert '| A | B_ID | B | ID |' in content
    assert 'A ||--o{ B' not in content


def test_one_hundred_tables_stay_in_one_document(make_dump):
    documents = render_documents(build_schema(make_dump(100)), 'der', 'dump.sql', GENERATED_AT)

    assert [doc.filename for doc in documents] == ['der.md']
    assert documents[0].content.count('        NUMBER ID PK') == 100


def test_one_hundred_fifty_tables_are_partitioned(make_dump):
    documents = render_documents(build_schema(make_dump(150)), 'der', 'dump.sql', GENERATED_AT)

    assert [doc.filename for doc in documents] == [
        'der_part_1.md', 'der_part_2.md', 'der_part_3.md', 'der_index.md'
    ]
    for document in documents[:3]:
        assert document.content.count('        NUMBER ID PK') == 50
    assert '# DER - Partition 2 of 3' in documents[1].content
    assert '**Tables:** 51 - 100 (50 tables)' in documents[1].content
    assert '    T51 {' in documents[1].content
    assert '    T50 {' not in documents[1].content


def test_last_partition_holds_the_remainder(make_dump):
    documents = render_documents(build_schema(make_dump(101)), 'der', 'dump.sql', GENERATED_AT)

    assert len(documents) == 4
    assert '**Tables:** 101 - 101 (1 tables)' in documents[2].content


def test_partition_navigation(make_dump):
    first, middle, last, index = render_documents(build_schema(make_dump(150)), 'der', 'dump.sql', GENERATED_AT)

    assert 'Previous partition' not in first.content
    assert '[Main index](der_index.md)' in first.content
    assert '[Next partition (2)](der_part_2.md)' in first.content

    assert '[Previous partition (1)](der_part_1.md)' in middle.content
    assert '[Next partition (3)](der_part_3.md)' in middle.content

    assert 'Next partition' not in last.content
    assert '[Main index](der_index.md)' in last.content

    assert '**Total tables:** 150' in index.content
    assert '**Partitions:** 3' in index.content
    for number in (1, 2, 3):
        assert f'### [Partition {number}](der_part_{number}.md)' in index.content
    assert '- **First tables:** T1, T2, T3...' in index.content


def test_cross_partition_relationships_only_in_index(make_dump):
    alters = (
        "ALTER TABLE T1 ADD CONSTRAINT FK_1 FOREIGN KEY (REF_ID) REFERENCES T60 (ID);\n"
        "ALTER TABLE T2 ADD CONSTRAINT FK_2 FOREIGN KEY (REF_ID) REFERENCES T3 (ID);\n"
        "ALTER TABLE T4 ADD CONSTRAINT FK_3 FOREIGN KEY (REF_ID) REFERENCES NOWHERE (ID);\n"
    )
    first, second, third, index = render_documents(
        build_schema(make_dump(150, alters)), 'der', 'dump.sql', GENERATED_AT
    )

    assert '    T2 ||--o{ T3 : "references"' in first.content
    assert '| T2 | REF_ID | T3 | ID |' in first.content
    for document in (first, second, third):
        assert 'T1 ||--o{ T60' not in document.content
        assert 'NOWHERE' not in document.content

    assert '| T1 | REF_ID | T60 | ID |' in index.content
    assert '| T2 | REF_ID | T3 | ID |' in index.content
    assert '| T4 | REF_ID | NOWHERE | ID |' in index.content
    assert '**Total relationships:** 3' in index.content
    assert '- **Relationships:** 1 internal relationships' in index.content


def test_custom_partition_settings(make_dump):
    documents = render_documents(
        build_schema(make_dump(3)), 'der', 'dump.sql', GENERATED_AT, partition_threshold=2, partition_size=1
    )

    assert [doc.filename for doc in documents] == ['der_part_1.md', 'der_part_2.md', 'der_part_3.md', 'der_index.md']


def test_empty_schema_renders_without_error():
    documents = render_documents(Schema({}, []), 'der', 'dump.sql', GENERATED_AT)

    assert len(documents) == 1
    assert '```mermaid\nerDiagram\n```' in documents[0].content
