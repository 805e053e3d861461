from sql_dump_der.der.sql_parser import (
    ForeignKey,
    ParsedColumn,
    ParsedConstraint,
    ParsedTable,
    RawStatement,
    parse_statements,
    parse_table_body,
    scan_alter_foreign_keys,
    scan_statements,
    split_definitions,
)

ORACLE_DUMP = '''
CREATE TABLE "HR"."EMPLOYEES"
   (	"EMPLOYEE_ID" NUMBER(6,0),
	"LAST_NAME" VARCHAR2(25 BYTE) NOT NULL ENABLE,
	"HIRE_DATE" DATE,
	"RESUME" CLOB,
	 CONSTRAINT "EMP_EMP_ID_PK" PRIMARY KEY ("EMPLOYEE_ID")
  USING INDEX PCTFREE 10 INITRANS 2 MAXTRANS 255 COMPUTE STATISTICS  ENABLE
   ) SEGMENT CREATION IMMEDIATE
  PCTFREE 10 PCTUSED 40 INITRANS 1 MAXTRANS 255
  TABLESPACE "USERS" ;
'''


def test_scan_statements_finds_name_and_body(emp_sql):
    statements = list(scan_statements(emp_sql))

    assert statements == [RawStatement('EMP', 'ID NUMBER PRIMARY KEY, NAME VARCHAR(50) NOT NULL')]


def test_scan_statements_skips_trailing_clause():
    statements = list(scan_statements("create table t (a number) tablespace users;"))

    assert statements == [RawStatement('t', 'a number')]


def test_scan_statements_is_restartable(emp_ord_sql):
    scan = scan_statements(emp_ord_sql)

    first = list(scan)
    second = list(scan)

    assert [s.table_token for s in first] == ['ORD', 'EMP']
    assert first == second


def test_scan_statements_if_not_exists():
    statements = list(scan_statements("CREATE TABLE IF NOT EXISTS orders (id INTEGER);"))

    assert statements == [RawStatement('orders', 'id INTEGER')]


def test_scan_statements_unbalanced_body_falls_back_to_last_paren():
    statements = list(scan_statements("CREATE TABLE T (A NUMBER(5, B NUMBER);"))

    assert statements == [RawStatement('T', 'A NUMBER(5, B NUMBER')]


def test_scan_statements_ignores_unterminated_statement():
    assert list(scan_statements("CREATE TABLE T (A NUMBER)")) == []


def test_scan_statements_oracle_dump():
    statements = list(scan_statements(ORACLE_DUMP))

    assert len(statements) == 1
    assert statements[0].table_token == '"HR"."EMPLOYEES"'
    assert statements[0].body.rstrip().endswith('ENABLE')


def test_split_definitions_respects_parentheses():
    body = "A NUMBER(10,2), B VARCHAR2(20), CONSTRAINT C CHECK (X IN (1,2,3))"

    parts = split_definitions(body)

    assert parts == ["A NUMBER(10,2)", "B VARCHAR2(20)", "CONSTRAINT C CHECK (X IN (1,2,3))"]


def test_split_definitions_member_count():
    members = ["ID NUMBER(5,0)", "PRICE DECIMAL(12,2)", "NAME VARCHAR(3)", "CONSTRAINT PK PRIMARY KEY (ID, NAME)"]

    assert split_definitions(",\n  ".join(members)) == members


def test_parse_table_body_columns(emp_sql):
    statement = list(scan_statements(emp_sql))[0]

    table = parse_table_body('EMP', statement.body)

    assert table.columns == (
        ParsedColumn('ID', 'NUMBER', is_pk=True, not_null=False),
        ParsedColumn('NAME', 'STRING', is_pk=False, not_null=True),
    )
    assert table.foreign_keys == ()


def test_parse_table_body_unnamed_foreign_key():
    table = parse_table_body('ORD', 'ID NUMBER, EMP_ID NUMBER, FOREIGN KEY (EMP_ID) REFERENCES EMP(ID)')

    assert [col.name for col in table.columns] == ['ID', 'EMP_ID']
    assert table.foreign_keys == (ForeignKey('ORD', ('EMP_ID',), 'EMP', ('ID',)),)


def test_parse_table_body_composite_foreign_key():
    table = parse_table_body(
        'LINE', 'ORDER_ID NUMBER, LINE_NO NUMBER, '
        'CONSTRAINT FK_LINE FOREIGN KEY ("ORDER_ID", "LINE_NO") REFERENCES "SALES"."ITEM" ("ID", "NO")'
    )

    assert table.foreign_keys == (ForeignKey('LINE', ('ORDER_ID', 'LINE_NO'), 'SALES_ITEM', ('ID', 'NO')),)


def test_parse_table_body_folds_primary_key_constraint():
    statement = list(scan_statements(ORACLE_DUMP))[0]

    table = parse_table_body('HR_EMPLOYEES', statement.body)

    assert table.columns == (
        ParsedColumn('EMPLOYEE_ID', 'NUMBER', is_pk=True, not_null=False),
        ParsedColumn('LAST_NAME', 'STRING', is_pk=False, not_null=True),
        ParsedColumn('HIRE_DATE', 'DATE'),
        ParsedColumn('RESUME', 'LOB'),
    )
    assert table.constraints == ()


def test_parse_table_body_primary_key_clears_not_null():
    table = parse_table_body('T', 'ID NUMBER NOT NULL, CONSTRAINT PK_T PRIMARY KEY (ID)')

    assert table.columns == (ParsedColumn('ID', 'NUMBER', is_pk=True, not_null=False),)


def test_parse_table_body_keeps_unique_and_check_constraints():
    table = parse_table_body(
        'T', "EMAIL VARCHAR2(100), CONSTRAINT UQ_EMAIL UNIQUE (EMAIL), CONSTRAINT CK_EMAIL CHECK (EMAIL LIKE '%@%')"
    )

    assert table.constraints == (ParsedConstraint('UNIQUE', ('EMAIL',)), ParsedConstraint('CHECK', ()))


def test_parse_table_body_rejects_fragments():
    # the stray ")" leaves the depth negative, so it has to come last
    table = parse_table_body('T', 'ID NUMBER, PARTITION BY RANGE (ID), KEY X, primary thing, LONELY, 50) NUMBER')

    assert [col.name for col in table.columns] == ['ID']


def test_parse_table_body_skips_malformed_constraints():
    table = parse_table_body(
        'T', 'ID NUMBER, CONSTRAINT PK_T PRIMARY KEY, CONSTRAINT FK_T FOREIGN KEY REFERENCES X'
    )

    assert table == ParsedTable('T', (ParsedColumn('ID', 'NUMBER'),), (), ())


def test_scan_alter_foreign_keys():
    sql = '''
    ALTER TABLE "HR"."EMP" ADD CONSTRAINT "FK_DEPT"
        FOREIGN KEY ("DEPT_ID") REFERENCES "HR"."DEPT" ("ID") ENABLE;
    alter table emp add constraint pk_emp primary key (id);
    ALTER TABLE ITEM ADD FOREIGN KEY (ORDER_ID) REFERENCES ORDERS (ID);
    '''

    foreign_keys = list(scan_alter_foreign_keys(sql))

    assert foreign_keys == [
        ForeignKey('HR_EMP', ('DEPT_ID',), 'HR_DEPT', ('ID',)),
        ForeignKey('ITEM', ('ORDER_ID',), 'ORDERS', ('ID',)),
    ]


def test_parse_statements_orders_tables_before_alter_foreign_keys():
    sql = '''
    CREATE TABLE A (ID NUMBER);
    ALTER TABLE A ADD CONSTRAINT FK_A FOREIGN KEY (ID) REFERENCES B (ID);
    CREATE TABLE B (ID NUMBER, A_ID NUMBER, CONSTRAINT FK_B FOREIGN KEY (A_ID) REFERENCES A (ID));
    '''

    events = list(parse_statements(sql))

    assert [type(event) for event in events] == [ParsedTable, ParsedTable, ForeignKey]
    assert events[1].foreign_keys == (ForeignKey('B', ('A_ID',), 'A', ('ID',)),)
    assert events[2] == ForeignKey('A', ('ID',), 'B', ('ID',))


def test_parse_statements_accepts_custom_scanner():
    statements = [RawStatement('"X"', 'ID NUMBER')]

    events = list(parse_statements('', statements))

    assert events == [ParsedTable('X', (ParsedColumn('ID', 'NUMBER'),), (), ())]
