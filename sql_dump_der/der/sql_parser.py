"""
Tolerant SQL dump parser - CREATE TABLE definitions and ALTER TABLE foreign keys

There is no SQL grammar here: statements are located with regular
expressions and parenthesis counting, and anything that does not look
like a column or a key constraint is dropped.
"""
import logging
import re
from typing import Iterable, Iterator, List, NamedTuple, Tuple, Union

from .naming import clean_name, simplify_data_type

logger = logging.getLogger(__name__)

_CREATE_TABLE_RE = re.compile(r'CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?([^\s(]+)\s*\(', re.IGNORECASE)
_ALTER_FK_RE = re.compile(
    r'ALTER\s+TABLE\s+(\S+)\s+ADD\s+\(?\s*(?:CONSTRAINT[^;]*?)?'
    r'FOREIGN\s+KEY\s*\(([^)]+)\)\s*REFERENCES\s+([^\s(]+)\s*\(([^)]+)\)',
    re.IGNORECASE
)

_CONSTRAINT_TOKEN_RE = re.compile(r'\bCONSTRAINT\b', re.IGNORECASE)
_TABLE_LEVEL_KEY_RE = re.compile(r'^(?:PRIMARY|FOREIGN)\s+KEY\b', re.IGNORECASE)
_PK_RE = re.compile(r'PRIMARY\s+KEY\s*\(([^)]+)\)', re.IGNORECASE)
_FK_RE = re.compile(
    r'FOREIGN\s+KEY\s*\(([^)]+)\)\s*REFERENCES\s+([^\s(]+)\s*\(([^)]+)\)',
    re.IGNORECASE
)
_UNIQUE_RE = re.compile(r'\bUNIQUE\s*\(([^)]+)\)', re.IGNORECASE)
_CHECK_RE = re.compile(r'\bCHECK\s*\(', re.IGNORECASE)
_COLUMN_RE = re.compile(r'^\s*(\S+)\s+([^\s,(]+)(?:\([^)]*\))?')
_DIGITS_PAREN_RE = re.compile(r'^\d+\)$')

# First tokens that mean the splitter caught a fragment, not a column
_NON_COLUMN_TOKENS = {'PARTITION', 'PRIMARY', 'KEY'}


class RawStatement(NamedTuple):
    """A CREATE TABLE statement as found in the dump"""
    table_token: str
    body: str


class ParsedColumn(NamedTuple):
    name: str
    data_type: str
    is_pk: bool = False
    not_null: bool = False


class ParsedConstraint(NamedTuple):
    kind: str
    columns: Tuple[str, ...]


class ForeignKey(NamedTuple):
    from_table: str
    from_columns: Tuple[str, ...]
    to_table: str
    to_columns: Tuple[str, ...]


class ParsedTable(NamedTuple):
    name: str
    columns: Tuple[ParsedColumn, ...]
    constraints: Tuple[ParsedConstraint, ...]
    foreign_keys: Tuple[ForeignKey, ...]


ParseEvent = Union[ParsedTable, ForeignKey]


class StatementScan:
    """
    Lazy sequence of RawStatement values for one dump.

    Every iteration scans the text again from the start, so the
    scan can be consumed more than once.
    """

    def __init__(self, sql: str):
        self.sql = sql

    def __iter__(self) -> Iterator[RawStatement]:
        sql = self.sql
        pos = 0
        while True:
            match = _CREATE_TABLE_RE.search(sql, pos)
            if not match:
                return

            body_start = match.end()
            delimiter = sql.find(';', body_start)
            if delimiter == -1:
                # truncated statement at the end of the dump
                return

            body_end = _find_closing_paren(sql, body_start, delimiter)
            if body_end == -1:
                body_end = sql.rfind(')', body_start, delimiter)

            if body_end != -1:
                yield RawStatement(match.group(1), sql[body_start:body_end])
            pos = delimiter + 1

    def __repr__(self):
        return f"StatementScan(chars={len(self.sql)})"


def scan_statements(sql: str) -> StatementScan:
    """Locate CREATE TABLE statements: (table name token, body) pairs"""
    return StatementScan(sql)


def _find_closing_paren(text: str, start: int, end: int) -> int:
    """Index of the parenthesis closing the one just before ``start``, or -1"""
    depth = 1
    for i in range(start, end):
        char = text[i]
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_definitions(body: str) -> List[str]:
    """Split a table body on commas that are not inside parentheses"""
    parts = []
    current = ''
    depth = 0

    for char in body:
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
        elif char == ',' and depth == 0:
            parts.append(current.strip())
            current = ''
            continue
        current += char

    parts.append(current.strip())
    return [part for part in parts if part]


def _split_column_list(column_list: str) -> Tuple[str, ...]:
    return tuple(clean_name(col) for col in column_list.split(','))


def is_constraint(definition: str) -> bool:
    return bool(_CONSTRAINT_TOKEN_RE.search(definition)
                or _TABLE_LEVEL_KEY_RE.match(definition))


def parse_column(definition: str):
    """
    Parse one column definition, returning None for fragments that are
    not columns (partition clauses, stray key keywords, ...).
    """
    col_match = _COLUMN_RE.match(definition)
    if not col_match:
        return None

    raw_name = col_match.group(1)
    name = clean_name(raw_name)
    if (not name
            or ')' in raw_name
            or _DIGITS_PAREN_RE.match(raw_name)
            or raw_name.upper() in _NON_COLUMN_TOKENS):
        return None

    upper_definition = definition.upper()
    is_pk = 'PRIMARY KEY' in upper_definition
    return ParsedColumn(
        name=name,
        data_type=simplify_data_type(col_match.group(2)),
        is_pk=is_pk,
        not_null='NOT NULL' in upper_definition and not is_pk
    )


def parse_constraint(table_name: str, definition: str):
    """Return a ParsedConstraint, a ForeignKey or None when nothing usable matched"""
    upper_definition = definition.upper()

    if 'PRIMARY KEY' in upper_definition:
        pk_match = _PK_RE.search(definition)
        if pk_match:
            return ParsedConstraint('PK', _split_column_list(pk_match.group(1)))
        return None

    if 'FOREIGN KEY' in upper_definition:
        fk_match = _FK_RE.search(definition)
        if fk_match:
            return ForeignKey(
                from_table=table_name,
                from_columns=_split_column_list(fk_match.group(1)),
                to_table=clean_name(fk_match.group(2)),
                to_columns=_split_column_list(fk_match.group(3))
            )
        return None

    unique_match = _UNIQUE_RE.search(definition)
    if unique_match:
        return ParsedConstraint('UNIQUE', _split_column_list(unique_match.group(1)))
    if _CHECK_RE.search(definition):
        return ParsedConstraint('CHECK', ())
    return None


def parse_table_body(table_name: str, body: str) -> ParsedTable:
    """Turn the text between a table's parentheses into columns and constraints"""
    columns = []
    constraints = []
    foreign_keys = []
    primary_keys = set()

    for definition in split_definitions(body):
        if is_constraint(definition):
            constraint = parse_constraint(table_name, definition)
            if isinstance(constraint, ForeignKey):
                foreign_keys.append(constraint)
            elif constraint is not None and constraint.kind == 'PK':
                primary_keys.update(constraint.columns)
            elif constraint is not None:
                constraints.append(constraint)
            continue

        column = parse_column(definition)
        if column is not None:
            columns.append(column)

    # table level PRIMARY KEY (...) becomes a column flag
    if primary_keys:
        columns = [
            col._replace(is_pk=True, not_null=False) if col.name in primary_keys else col
            for col in columns
        ]

    return ParsedTable(table_name, tuple(columns), tuple(constraints), tuple(foreign_keys))


def scan_alter_foreign_keys(sql: str) -> Iterator[ForeignKey]:
    """Foreign keys added out of line with ALTER TABLE ... ADD CONSTRAINT"""
    for match in _ALTER_FK_RE.finditer(sql):
        yield ForeignKey(
            from_table=clean_name(match.group(1)),
            from_columns=_split_column_list(match.group(2)),
            to_table=clean_name(match.group(3)),
            to_columns=_split_column_list(match.group(4))
        )


def parse_statements(sql: str, statements: Iterable[RawStatement] = None) -> Iterator[ParseEvent]:
    """
    Parse a dump into a stream of events: one ParsedTable per CREATE TABLE
    (in dump order) followed by one ForeignKey per ALTER TABLE foreign key.

    ``statements`` lets a caller plug in another statement scanner.
    """
    if statements is None:
        statements = scan_statements(sql)

    for statement in statements:
        table_name = clean_name(statement.table_token)
        if not table_name:
            logger.debug(f"Skipping table with unusable name: {statement.table_token!r}")
            continue
        yield parse_table_body(table_name, statement.body)

    yield from scan_alter_foreign_keys(sql)
