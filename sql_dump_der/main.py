#!/usr/bin/env python3
"""
SQL dump to DER - Main Program
Converts the CREATE TABLE / ALTER TABLE statements of a database dump into
Mermaid entity-relationship diagrams (Markdown)
"""
import argparse
import logging
import sys
from pathlib import Path

from sql_dump_der.app_config import config
from sql_dump_der.der import build_er_model, extract_statements, render_documents, serialize_buckets, write_documents
from sql_dump_der.der.writer import write_text

logger = logging.getLogger(__name__)


def sql_to_der(sql_content: str, output_name: str = "database_der", output_dir: str = ".",
               source_name: str = "-", extract_file: str = None, docx_file: str = None,
               graphviz_name: str = None, render_image: bool = False):
    """
    Convert a dump to DER documents

    Args:
        sql_content: Dump text
        output_name: Output file name without extension
        output_dir: Directory the documents are written to
        source_name: Shown in the document header
        extract_file: Also write the extracted statements to this file
        docx_file: Also write Word documentation to this file
        graphviz_name: Also write a Graphviz diagram with this name
        render_image: Render the Graphviz diagram to PNG instead of DOT source

    Returns:
        List of written paths, empty when no table was found
    """
    written = []

    if extract_file:
        buckets = extract_statements(sql_content)
        written.append(write_text(extract_file, serialize_buckets(buckets)))
        counts = ", ".join(f"{len(statements)} {kind}" for kind, statements in buckets.items())
        print(f"📄 Extracted statements ({counts}) to: {extract_file}")

    print("🔍 Parsing SQL statements...")
    schema, message = build_er_model(sql_content)

    if message:
        print(f"ℹ️  {message}")
        return written

    print(f"✅ Found {len(schema.tables)} table(s) and {len(schema.relationships)} relationship(s)")

    print("\n🎨 Rendering DER...")
    documents = render_documents(schema, output_name, source_name, **config.get_render_config())
    written.extend(write_documents(documents, output_dir))

    if len(documents) > 1:
        print(f"   - {len(documents) - 1} partitions, index: {documents[-1].filename}")

    if docx_file:
        from sql_dump_der.der.doc_generator import generate_docx
        written.append(Path(generate_docx(schema, docx_file)))

    if graphviz_name:
        from sql_dump_der.der.graph_renderer import render_graphviz
        written.append(Path(render_graphviz(schema, graphviz_name, output_dir, render_image)))

    print("\n✅ Files written:")
    for path in written:
        print(f"   - {path}")
    return written


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Generate a Mermaid entity-relationship diagram from a SQL dump"
    )
    parser.add_argument(
        "input",
        help="SQL dump file path or '-' for stdin"
    )
    parser.add_argument(
        "-o", "--output",
        default="database_der.md",
        help="Output Markdown file (its name without .md is the base of partition files)"
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the generated documents (default: directory of --output, else DER_OUTPUT_DIR)"
    )
    parser.add_argument(
        "--extract",
        metavar="FILE",
        help="Also write the CREATE/ALTER/INDEX statements, grouped by kind, to FILE"
    )
    parser.add_argument(
        "--docx",
        metavar="FILE",
        help="Also write Word documentation of the schema to FILE"
    )
    parser.add_argument(
        "--graphviz",
        metavar="NAME",
        help="Also write a Graphviz diagram NAME.gv"
    )
    parser.add_argument(
        "--render-image",
        action="store_true",
        help="Render the Graphviz diagram to PNG (needs Graphviz installed)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    config.validate()

    if args.input == "-":
        print("📝 Reading SQL from stdin (press Ctrl+D when done)...")
        sql_content = sys.stdin.read()
    else:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"❌ Error: File not found: {args.input}")
            sys.exit(1)

        print(f"📝 Reading SQL from: {args.input}")
        sql_content = input_path.read_text(encoding="utf-8", errors="replace")

    output_path = Path(args.output)
    output_name = output_path.name
    if output_name.endswith(".md"):
        output_name = output_name[:-3]

    output_dir = args.output_dir
    if output_dir is None:
        output_dir = output_path.parent if output_path.parent != Path(".") else config.OUTPUT_DIR

    try:
        sql_to_der(sql_content, output_name, output_dir, args.input,
                   args.extract, args.docx, args.graphviz, args.render_image)
    except OSError as e:
        print(f"\n❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
