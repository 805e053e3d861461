"""
ER Model Classes - Represent tables, columns, relationships and the schema
built from a parsed dump
"""
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple

from .sql_parser import ForeignKey, ParsedTable, ParseEvent, parse_statements

logger = logging.getLogger(__name__)

NO_TABLES_MESSAGE = "No CREATE TABLE statements found in the SQL."


class Column:
    """Represents a column of a table"""

    def __init__(self, name: str, data_type: str, is_pk: bool = False, not_null: bool = False):
        self.name = name
        self.data_type = data_type
        self.is_pk = is_pk
        # a primary key is implicitly NOT NULL, only flag the others
        self.not_null = not_null and not is_pk

    def characteristics(self) -> List[str]:
        """Markers shown in the column listing, e.g. ['PK'] or ['NOT NULL']"""
        markers = []
        if self.is_pk:
            markers.append('PK')
        if self.not_null:
            markers.append('NOT NULL')
        return markers

    def to_dict(self):
        return {
            "name": self.name,
            "type": self.data_type,
            "isPrimaryKey": self.is_pk,
            "isNotNull": self.not_null,
        }

    def __repr__(self):
        pk_str = " [PK]" if self.is_pk else ""
        return f"Column(name={self.name}{pk_str}, type={self.data_type})"


class Constraint:
    """Inline constraint kept on a table (UNIQUE, CHECK)"""

    def __init__(self, kind: str, columns: Iterable[str] = ()):
        self.kind = kind
        self.columns = tuple(columns)

    def to_dict(self):
        return {"type": self.kind, "columns": list(self.columns)}

    def __repr__(self):
        return f"Constraint({self.kind} {', '.join(self.columns)})"


class Table:
    """Represents a table (entity) in the ER diagram"""

    def __init__(self, name: str, columns: Iterable[Column], constraints: Iterable[Constraint] = ()):
        self.name = name
        self.columns: Tuple[Column, ...] = tuple(columns)
        self.constraints: Tuple[Constraint, ...] = tuple(constraints)

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def primary_keys(self) -> List[str]:
        return [col.name for col in self.columns if col.is_pk]

    def to_dict(self):
        return {
            "name": self.name,
            "columns": [col.to_dict() for col in self.columns],
            "constraints": [constraint.to_dict() for constraint in self.constraints],
        }

    def __repr__(self):
        return f"Table(name={self.name}, columns={len(self.columns)})"


class Relationship:
    """
    Directed foreign key edge: ``from_table`` (the referencing table)
    points at ``to_table``.
    """

    def __init__(self, from_table: str, from_columns: Iterable[str],
                 to_table: str, to_columns: Iterable[str]):
        self.from_table = from_table
        self.from_columns = tuple(from_columns)
        self.to_table = to_table
        self.to_columns = tuple(to_columns)

    def to_dict(self):
        return {
            "from": self.from_table,
            "fromColumns": list(self.from_columns),
            "to": self.to_table,
            "toColumns": list(self.to_columns),
        }

    def __eq__(self, other):
        if not isinstance(other, Relationship):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.from_table, self.from_columns, self.to_table, self.to_columns))

    def __repr__(self):
        return (f"Relationship({self.from_table}.{','.join(self.from_columns)} -> "
                f"{self.to_table}.{','.join(self.to_columns)})")


class Schema:
    """Read-only result of parsing one dump"""

    def __init__(self, tables: Dict[str, Table], relationships: Iterable[Relationship]):
        self._tables = dict(tables)
        self.tables = MappingProxyType(self._tables)
        self.relationships: Tuple[Relationship, ...] = tuple(relationships)

    @property
    def table_names(self) -> List[str]:
        return list(self._tables)

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def drawable_relationships(self, table_names: Iterable[str] = None) -> List[Relationship]:
        """
        Relationships whose both ends are tables of this schema, or of
        ``table_names`` when given. Dangling references are left out.
        """
        names = self._tables if table_names is None else set(table_names) & set(self._tables)
        return [rel for rel in self.relationships
                if rel.from_table in names and rel.to_table in names]

    def to_dict(self):
        return {
            "tables": [table.to_dict() for table in self._tables.values()],
            "relationships": [rel.to_dict() for rel in self.relationships],
        }

    def __len__(self):
        return len(self._tables)

    def __repr__(self):
        return f"Schema(tables={len(self._tables)}, relationships={len(self.relationships)})"


def _to_relationship(fk: ForeignKey) -> Relationship:
    return Relationship(fk.from_table, fk.from_columns, fk.to_table, fk.to_columns)


def _to_table(parsed: ParsedTable) -> Table:
    columns = [Column(col.name, col.data_type, col.is_pk, col.not_null) for col in parsed.columns]
    constraints = [Constraint(c.kind, c.columns) for c in parsed.constraints]
    return Table(parsed.name, columns, constraints)


def fold_schema(events: Iterable[ParseEvent]) -> Schema:
    """
    Combine parser events into a Schema.

    A table without any usable column is dropped. A table name seen twice
    keeps its first position but takes the later definition; relationships
    collected for the earlier definition stay. Out of line foreign keys are
    kept even when they point at unknown tables.
    """
    tables: Dict[str, Table] = {}
    relationships: List[Relationship] = []

    for event in events:
        if isinstance(event, ParsedTable):
            if not event.columns:
                logger.debug(f"Table {event.name} has no valid columns, skipped")
                continue
            if event.name in tables:
                logger.debug(f"Table {event.name} defined again, replacing previous definition")
            tables[event.name] = _to_table(event)
            relationships.extend(_to_relationship(fk) for fk in event.foreign_keys)

            if len(tables) % 100 == 0:
                logger.debug(f"Processed {len(tables)} tables...")
        else:
            relationships.append(_to_relationship(event))

    logger.info(f"Found {len(tables)} tables and {len(relationships)} relationships")
    return Schema(tables, relationships)


def build_schema(sql: str) -> Schema:
    """Parse a dump and fold the result into a Schema"""
    return fold_schema(parse_statements(sql))


def build_er_model(sql: str) -> Tuple[Schema, str]:
    """
    Build the ER model of a dump

    Args:
        sql: Dump text

    Returns:
        Tuple of (schema, message); the message is empty unless no table
        definition was found
    """
    schema = build_schema(sql)
    if not schema.tables:
        return schema, NO_TABLES_MESSAGE
    return schema, ""
