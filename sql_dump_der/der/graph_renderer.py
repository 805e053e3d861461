"""
Graphviz rendering of a schema - one record node per table, one edge per
foreign key
"""
import logging
import os

import graphviz

from .er_model import Schema

logger = logging.getLogger(__name__)


def _escape_record(text: str) -> str:
    for char in '{}|<>':
        text = text.replace(char, f'\\{char}')
    return text


class ERDiagramRenderer:
    """Renders ER diagrams using Graphviz"""

    def __init__(self, name: str = "ER_Diagram", image_format: str = "png"):
        self.dot = graphviz.Digraph(name, format=image_format)
        self.dot.attr(rankdir="LR")
        self.dot.attr("node", fontname="Arial", fontsize="10", shape="record")
        self.dot.attr("edge", arrowsize="0.7", penwidth="1.2")

    def render_tables(self, schema: Schema):
        """One record node per table listing its columns"""
        for table in schema.tables.values():
            rows = []
            for column in table.columns:
                row = f"{column.name} : {column.data_type}"
                if column.is_pk:
                    row += " [PK]"
                rows.append(_escape_record(row))
            label = "{" + _escape_record(table.name) + "|" + "\\l".join(rows) + "\\l}"
            self.dot.node(table.name, label=label, style="filled", fillcolor="lightblue")

    def render_relationships(self, schema: Schema):
        """Edges from referencing table to referenced table, dangling ones skipped"""
        for rel in schema.drawable_relationships():
            self.dot.edge(
                rel.from_table,
                rel.to_table,
                label=", ".join(rel.from_columns),
                arrowhead="crow",
                arrowtail="tee",
                dir="both"
            )

    def source(self) -> str:
        return self.dot.source

    def save(self, filename: str, directory: str = ".", render: bool = False) -> str:
        """
        Save the DOT source, or render an image next to it when ``render``
        is set (needs the Graphviz ``dot`` executable).
        """
        if render:
            path = self.dot.render(filename=filename, directory=directory, cleanup=True)
        else:
            path = self.dot.save(filename=f"{filename}.gv", directory=directory)
        logger.info(f"Graphviz diagram written to {path}")
        return os.fspath(path)


def render_graphviz(schema: Schema, output_name: str = "er_diagram", directory: str = ".",
                    render: bool = False) -> str:
    """
    Convenience function to render a schema with Graphviz

    Returns:
        Path of the written file
    """
    renderer = ERDiagramRenderer(output_name)
    renderer.render_tables(schema)
    renderer.render_relationships(schema)
    return renderer.save(output_name, directory, render)
