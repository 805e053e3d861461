"""
ER Diagram Visualization Module - Renders the schema as Mermaid erDiagram
blocks inside Markdown documents, split into partitions for large schemas
"""
import logging
import math
from datetime import datetime
from typing import Iterable, List, NamedTuple, Sequence

from .er_model import Relationship, Schema, Table

logger = logging.getLogger(__name__)

PARTITION_THRESHOLD = 100
PARTITION_SIZE = 50

RELATIONSHIP_ARROW = '||--o{'
RELATIONSHIP_LABEL = 'references'
FOOTER = '*Generated automatically by sql-dump-der*'


class RenderedDocument(NamedTuple):
    filename: str
    content: str


class MermaidDiagramRenderer:
    """Builds the text of one ``erDiagram`` block"""

    def __init__(self):
        self.lines = ['erDiagram']

    def render_tables(self, tables: Iterable[Table]):
        """Render tables and their columns"""
        for table in tables:
            self.lines.append(f"    {table.name} {{")
            for column in table.columns:
                column_def = f"        {column.data_type} {column.name}"
                if column.is_pk:
                    column_def += ' PK'
                elif column.not_null:
                    column_def += ' "NOT NULL"'
                self.lines.append(column_def)
            self.lines.append('    }')
            self.lines.append('')

    def render_relationships(self, relationships: Iterable[Relationship]):
        """Render one line per relationship; callers pass only drawable ones"""
        for rel in relationships:
            self.lines.append(
                f'    {rel.from_table} {RELATIONSHIP_ARROW} {rel.to_table} : "{RELATIONSHIP_LABEL}"'
            )

    def source(self) -> str:
        return '\n'.join(self.lines) + '\n'


def render_mermaid(schema: Schema, table_names: Sequence[str] = None) -> str:
    """
    Render the erDiagram block of a schema, or of the ``table_names``
    subset of it. Only relationships with both ends inside the rendered
    tables are drawn.
    """
    if table_names is None:
        table_names = schema.table_names
    renderer = MermaidDiagramRenderer()
    renderer.render_tables(schema.tables[name] for name in table_names)
    renderer.render_relationships(schema.drawable_relationships(table_names))
    return renderer.source()


def _fenced(diagram: str) -> str:
    return f"```mermaid\n{diagram}```\n\n"


def _table_listing(tables: Iterable[Table], heading: str) -> str:
    content = f"## {heading}\n\n"
    for table in tables:
        content += f"### {table.name}\n\n"
        content += "| Column | Type | Characteristics |\n"
        content += "|--------|------|-----------------|\n"
        for column in table.columns:
            content += f"| {column.name} | {column.data_type} | {', '.join(column.characteristics())} |\n"
        content += "\n"
    return content


def _relationship_table(relationships: Iterable[Relationship]) -> str:
    content = "| Source table | Column(s) | Target table | Column(s) |\n"
    content += "|--------------|-----------|--------------|-----------|\n"
    for rel in relationships:
        content += (f"| {rel.from_table} | {', '.join(rel.from_columns)} "
                    f"| {rel.to_table} | {', '.join(rel.to_columns)} |\n")
    return content + "\n"


def _timestamp(generated_at: datetime) -> str:
    return generated_at.strftime('%Y-%m-%d %H:%M:%S')


def render_single_document(schema: Schema, base_name: str, source_name: str,
                           generated_at: datetime) -> RenderedDocument:
    """The whole schema in one Markdown document"""
    content = "# Entity-Relationship Diagram (DER)\n\n"
    content += f"**Generated:** {_timestamp(generated_at)}  \n"
    content += f"**Source file:** {source_name}  \n"
    content += f"**Tables found:** {len(schema.tables)}  \n"
    content += f"**Relationships found:** {len(schema.relationships)}  \n\n"

    content += "## Diagram\n\n"
    content += _fenced(render_mermaid(schema))
    content += _table_listing(schema.tables.values(), 'Tables')

    if schema.relationships:
        content += "## Relationships\n\n"
        content += _relationship_table(schema.relationships)

    content += "---\n\n"
    content += FOOTER + "\n"
    return RenderedDocument(f"{base_name}.md", content)


def partition_filename(base_name: str, number: int) -> str:
    return f"{base_name}_part_{number}.md"


def index_filename(base_name: str) -> str:
    return f"{base_name}_index.md"


def render_partitioned_documents(schema: Schema, base_name: str, source_name: str,
                                 generated_at: datetime,
                                 partition_size: int = PARTITION_SIZE) -> List[RenderedDocument]:
    """
    One document per chunk of ``partition_size`` tables (discovery order)
    plus an index document, which comes last.

    A chunk diagram only draws relationships between two tables of the
    same chunk; the index lists every relationship.
    """
    table_names = schema.table_names
    total_tables = len(table_names)
    total_partitions = math.ceil(total_tables / partition_size)
    timestamp = _timestamp(generated_at)
    index_name = index_filename(base_name)

    documents = []
    index_content = "# DER Index - Database Diagrams\n\n"
    index_content += f"**Generated:** {timestamp}  \n"
    index_content += f"**Source file:** {source_name}  \n"
    index_content += f"**Total tables:** {total_tables}  \n"
    index_content += f"**Total relationships:** {len(schema.relationships)}  \n"
    index_content += f"**Partitions:** {total_partitions}  \n\n"
    index_content += "## Partitions\n\n"

    for i in range(total_partitions):
        number = i + 1
        start_index = i * partition_size
        end_index = min(start_index + partition_size, total_tables)
        chunk_names = table_names[start_index:end_index]
        chunk_tables = [schema.tables[name] for name in chunk_names]
        chunk_relationships = schema.drawable_relationships(chunk_names)
        filename = partition_filename(base_name, number)

        content = f"# DER - Partition {number} of {total_partitions}\n\n"
        content += f"**Tables:** {start_index + 1} - {end_index} ({len(chunk_names)} tables)  \n"
        content += f"**File:** {filename}  \n"
        content += f"**Generated:** {timestamp}  \n\n"

        content += "## Navigation\n\n"
        if number > 1:
            content += f"⬅️ [Previous partition ({number - 1})]({partition_filename(base_name, number - 1)})  \n"
        content += f"🏠 [Main index]({index_name})  \n"
        if number < total_partitions:
            content += f"➡️ [Next partition ({number + 1})]({partition_filename(base_name, number + 1)})  \n"
        content += "\n"

        content += "## Diagram\n\n"
        content += _fenced(render_mermaid(schema, chunk_names))
        content += _table_listing(chunk_tables, 'Tables in this partition')

        if chunk_relationships:
            content += "## Relationships in this partition\n\n"
            content += _relationship_table(chunk_relationships)

        content += "---\n\n"
        content += f"*Partition {number} of {total_partitions} - generated automatically by sql-dump-der*\n"
        documents.append(RenderedDocument(filename, content))

        first_tables = ', '.join(chunk_names[:3]) + ('...' if len(chunk_names) > 3 else '')
        index_content += f"### [Partition {number}]({filename})\n"
        index_content += f"- **Tables:** {start_index + 1} - {end_index}\n"
        index_content += f"- **Count:** {len(chunk_names)} tables\n"
        index_content += f"- **Relationships:** {len(chunk_relationships)} internal relationships\n"
        index_content += f"- **First tables:** {first_tables}\n\n"

        logger.debug(f"Rendered partition {number}/{total_partitions}: {filename}")

    index_content += "## Full summary\n\n"
    index_content += "### All relationships\n\n"
    if schema.relationships:
        index_content += _relationship_table(schema.relationships)

    index_content += "---\n\n"
    index_content += "*Index generated automatically by sql-dump-der*\n"
    documents.append(RenderedDocument(index_name, index_content))
    return documents


def render_documents(schema: Schema, base_name: str = 'database_der', source_name: str = '-',
                     generated_at: datetime = None,
                     partition_threshold: int = PARTITION_THRESHOLD,
                     partition_size: int = PARTITION_SIZE) -> List[RenderedDocument]:
    """
    Render a schema into Markdown documents

    Args:
        schema: Parsed schema
        base_name: Output file name without extension
        source_name: Shown in the document header
        generated_at: Timestamp shown in the headers, defaults to now
        partition_threshold: Largest table count rendered as one document
        partition_size: Tables per partition above the threshold

    Returns:
        A single document, or the partition documents followed by the index
    """
    if generated_at is None:
        generated_at = datetime.now()

    if len(schema.tables) > partition_threshold:
        logger.info(f"Large schema ({len(schema.tables)} tables), rendering partitions of {partition_size}")
        return render_partitioned_documents(schema, base_name, source_name, generated_at, partition_size)
    return [render_single_document(schema, base_name, source_name, generated_at)]
