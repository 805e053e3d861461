"""
Statement extraction - copies CREATE TABLE, ALTER TABLE, constraint and
index statements out of a dump verbatim, grouped by kind
"""
import re
from typing import Dict, List

CREATE_TABLE = 'CREATE TABLE'
ALTER_TABLE = 'ALTER TABLE'
CONSTRAINT = 'CONSTRAINT'
INDEX = 'INDEX'

_CREATE_TABLE_RE = re.compile(r'CREATE\s+TABLE[\s\S]*?;', re.IGNORECASE)
_ALTER_TABLE_RE = re.compile(r'ALTER\s+TABLE[^;]*;', re.IGNORECASE)
_ADD_CONSTRAINT_RE = re.compile(r'\bADD\s+\(?\s*CONSTRAINT\b', re.IGNORECASE)
_INDEX_RE = re.compile(r'CREATE\s+(?:UNIQUE\s+|BITMAP\s+)?INDEX[^;]*;', re.IGNORECASE)


def extract_statements(sql: str) -> Dict[str, List[str]]:
    """
    Capture statements by kind, in dump order. ALTER TABLE statements
    adding a constraint go to the CONSTRAINT bucket, the rest to ALTER TABLE.
    """
    buckets = {kind: [] for kind in (CREATE_TABLE, ALTER_TABLE, CONSTRAINT, INDEX)}
    buckets[CREATE_TABLE] = _CREATE_TABLE_RE.findall(sql)

    for statement in _ALTER_TABLE_RE.findall(sql):
        if _ADD_CONSTRAINT_RE.search(statement):
            buckets[CONSTRAINT].append(statement)
        else:
            buckets[ALTER_TABLE].append(statement)

    buckets[INDEX] = _INDEX_RE.findall(sql)
    return buckets


def serialize_buckets(buckets: Dict[str, List[str]]) -> str:
    """Flatten the buckets back into one SQL text, one section per kind"""
    sections = []
    for kind, statements in buckets.items():
        if not statements:
            continue
        header = f"-- {kind} ({len(statements)} statements)"
        sections.append(header + '\n\n' + '\n\n'.join(statements))
    return '\n\n'.join(sections) + '\n' if sections else ''
