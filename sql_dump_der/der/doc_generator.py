"""
Doc Generator Module - Generates database schema documentation
(Word and HTML) from a parsed schema.
"""
import html
from datetime import datetime
from typing import Dict, List

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt

from .er_model import Schema, Table

HEADERS = ["Column", "Type", "Nullable", "Primary key"]
COLUMN_WIDTHS = [Cm(5.0), Cm(3.0), Cm(2.5), Cm(2.5)]

# border sizes are in eighths of a point
THICK_LINE = '12'
THIN_LINE = '6'


def _column_rows(table: Table) -> List[List[str]]:
    return [
        [col.name, col.data_type, 'No' if col.not_null or col.is_pk else 'Yes', 'Yes' if col.is_pk else 'No']
        for col in table.columns
    ]


def _foreign_key_notes(schema: Schema) -> Dict[str, List[str]]:
    """Foreign key descriptions per referencing table"""
    notes = {}
    for rel in schema.relationships:
        notes.setdefault(rel.from_table, []).append(
            f"{', '.join(rel.from_columns)} → {rel.to_table}.{', '.join(rel.to_columns)}"
        )
    return notes


def _set_cell_border(cell, edge: str, size: str = None):
    """Set one border of a cell; no size means no line"""
    tc_pr = cell._tc.get_or_add_tcPr()
    borders = tc_pr.find(qn('w:tcBorders'))
    if borders is None:
        borders = OxmlElement('w:tcBorders')
        tc_pr.append(borders)

    existing = borders.find(qn(f'w:{edge}'))
    if existing is not None:
        borders.remove(existing)

    border = OxmlElement(f'w:{edge}')
    if size is None:
        border.set(qn('w:val'), 'nil')
    else:
        border.set(qn('w:val'), 'single')
        border.set(qn('w:sz'), size)
        border.set(qn('w:space'), '0')
        border.set(qn('w:color'), '000000')
    borders.append(border)


def _set_triple_line_style(table):
    """
    Three-line table: thick top rule, thin rule under the header row,
    thick bottom rule, nothing else.
    """
    for row in table.rows:
        for cell in row.cells:
            for edge in ('top', 'left', 'bottom', 'right'):
                _set_cell_border(cell, edge)

    for cell in table.rows[0].cells:
        _set_cell_border(cell, 'top', THICK_LINE)
        _set_cell_border(cell, 'bottom', THIN_LINE)
    for cell in table.rows[-1].cells:
        _set_cell_border(cell, 'bottom', THICK_LINE)


def generate_docx(schema: Schema, filename, generated_at: datetime = None):
    """
    Write a .docx documenting every table as a three-line table.
    ``filename`` is a path or a writable binary stream.
    """
    generated_at = generated_at or datetime.now()
    doc = Document()

    style = doc.styles['Normal']
    style.font.name = 'Arial'
    style.font.size = Pt(10.5)

    title = doc.add_heading('Database Schema Documentation', level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    info_para = doc.add_paragraph()
    info_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    info_para.add_run(f'Generated: {generated_at.strftime("%Y-%m-%d %H:%M:%S")}\n').font.size = Pt(10)
    info_para.add_run(f'Tables: {len(schema.tables)}\n').font.size = Pt(10)
    info_para.add_run(f'Relationships: {len(schema.relationships)}').font.size = Pt(10)

    fk_notes = _foreign_key_notes(schema)

    for idx, table in enumerate(schema.tables.values()):
        heading = doc.add_paragraph(f"Table {idx + 1}: {table.name}")
        heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
        heading.runs[0].font.bold = True
        heading.runs[0].font.size = Pt(12)

        tbl = doc.add_table(rows=1, cols=len(HEADERS))
        tbl.autofit = False

        for cell, header_text in zip(tbl.rows[0].cells, HEADERS):
            cell.text = header_text
            cell.paragraphs[0].alignment = WD_ALIGN_PARAGRAPH.CENTER
            cell.paragraphs[0].runs[0].font.bold = True

        for values in _column_rows(table):
            row_cells = tbl.add_row().cells
            for i, value in enumerate(values):
                row_cells[i].text = value
                # name and type left aligned, flags centered
                if i >= 2:
                    row_cells[i].paragraphs[0].alignment = WD_ALIGN_PARAGRAPH.CENTER

        _set_triple_line_style(tbl)

        for row in tbl.rows:
            for cell, width in zip(row.cells, COLUMN_WIDTHS):
                cell.width = width

        if table.name in fk_notes:
            note_para = doc.add_paragraph("Foreign keys: " + "; ".join(fk_notes[table.name]))
            note_para.paragraph_format.left_indent = Cm(0.5)
            note_para.runs[0].font.size = Pt(9)
            note_para.runs[0].font.italic = True

        doc.add_paragraph()

    footer = doc.add_paragraph()
    footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
    footer.add_run('Generated automatically by sql-dump-der').font.size = Pt(9)

    doc.save(filename)
    return filename


CSS = """
    <style>
        body { font-family: Arial, sans-serif; color: #333; background: #f5f7fa; }
        .document-container { max-width: 960px; margin: 0 auto; background: #fff; padding: 2rem; }
        .document-title { text-align: center; color: #2c3e50; }
        .document-info { text-align: center; color: #7f8c8d; }
        .table-title { text-align: center; color: #2c3e50; }
        .three-line-table { width: 100%; border-collapse: collapse; margin-bottom: 1rem; }
        .three-line-table thead tr { border-top: 2pt solid #000; border-bottom: 1pt solid #000; }
        .three-line-table tbody tr:last-child { border-bottom: 2pt solid #000; }
        .three-line-table th, .three-line-table td { padding: 8px; text-align: left; }
        .pk-yes { color: #e74c3c; font-weight: bold; }
        .nullable-no { color: #e67e22; font-weight: bold; }
        .note { font-size: 9pt; color: #666; font-style: italic; }
    </style>
"""


def generate_html(schema: Schema, generated_at: datetime = None) -> str:
    """
    HTML version of the schema documentation, same layout as the .docx
    """
    generated_at = generated_at or datetime.now()
    fk_notes = _foreign_key_notes(schema)

    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="UTF-8">',
        "<title>Database Schema Documentation</title>",
        CSS,
        "</head>",
        "<body>",
        '<div class="document-container">',
        '<h1 class="document-title">Database Schema Documentation</h1>',
        f'<p class="document-info">Generated: {generated_at.strftime("%Y-%m-%d %H:%M:%S")} · '
        f'Tables: {len(schema.tables)} · Relationships: {len(schema.relationships)}</p>',
    ]

    for idx, table in enumerate(schema.tables.values()):
        parts.append('<div class="table-section">')
        parts.append(f'<h2 class="table-title">Table {idx + 1}: {html.escape(table.name)}</h2>')
        parts.append('<table class="three-line-table">')
        parts.append("<thead><tr>" + "".join(f"<th>{h}</th>" for h in HEADERS) + "</tr></thead>")
        parts.append("<tbody>")
        for name, data_type, nullable, pk in _column_rows(table):
            nullable_class = ' class="nullable-no"' if nullable == 'No' else ''
            pk_class = ' class="pk-yes"' if pk == 'Yes' else ''
            parts.append(
                f"<tr><td>{html.escape(name)}</td><td>{data_type}</td>"
                f"<td{nullable_class}>{nullable}</td><td{pk_class}>{pk}</td></tr>"
            )
        parts.append("</tbody>")
        parts.append("</table>")
        if table.name in fk_notes:
            notes = "; ".join(html.escape(note) for note in fk_notes[table.name])
            parts.append(f'<div class="note">Foreign keys: {notes}</div>')
        parts.append("</div>")

    parts.append("</div>")
    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts)
