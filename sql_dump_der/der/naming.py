"""
Identifier and data type normalization helpers
"""
import re

# Quoting characters Oracle/MySQL/SQL Server dumps wrap identifiers in
_QUOTE_CHARS = re.compile(r'["`\[\]]')
_DISALLOWED = re.compile(r'[^a-zA-Z0-9_]')

STRING = 'STRING'
NUMBER = 'NUMBER'
DATE = 'DATE'
LOB = 'LOB'
OTHER = 'OTHER'

# Checked in order, first hit wins
_TYPE_RULES = [
    (('VARCHAR', 'CHAR'), STRING),
    (('NUMBER', 'INTEGER', 'DECIMAL'), NUMBER),
    (('DATE', 'TIMESTAMP'), DATE),
    (('CLOB', 'BLOB'), LOB),
]


def clean_name(name: str) -> str:
    """
    Turn a raw identifier token into a name usable in Mermaid syntax.

    "HR"."EMP#" -> HR_EMP_NUM
    """
    name = _QUOTE_CHARS.sub('', name.strip())
    name = name.replace('.', '_').replace('#', '_NUM')
    return _DISALLOWED.sub('_', name)


def simplify_data_type(data_type: str) -> str:
    """Reduce a vendor type declaration to STRING/NUMBER/DATE/LOB/OTHER"""
    upper_type = data_type.upper()
    for keywords, category in _TYPE_RULES:
        if any(keyword in upper_type for keyword in keywords):
            return category
    return OTHER
