"""
SQL dump to DER (entity-relationship diagram) converter
"""
from .naming import clean_name, simplify_data_type
from .sql_parser import scan_statements, split_definitions, parse_table_body, parse_statements
from .er_model import Column, Table, Relationship, Schema, fold_schema, build_schema, build_er_model
from .visualization import RenderedDocument, render_mermaid, render_documents
from .extractor import extract_statements, serialize_buckets
from .writer import write_documents

__all__ = [
    'clean_name',
    'simplify_data_type',
    'scan_statements',
    'split_definitions',
    'parse_table_body',
    'parse_statements',
    'Column',
    'Table',
    'Relationship',
    'Schema',
    'fold_schema',
    'build_schema',
    'build_er_model',
    'RenderedDocument',
    'render_mermaid',
    'render_documents',
    'extract_statements',
    'serialize_buckets',
    'write_documents'
]
