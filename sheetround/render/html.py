"""
Editable HTML table view of a Table.

**Conceptual**: Renders the headers as a `<thead>` row and every record as a
row of `<input>` elements, one per cell. The input type follows the cell
kind (text, number, date, checkbox) so a browser offers the matching
editor. Each input carries `data-row` and `data-column` attributes; a page
script posts `(row, column, value)` back to whatever drives
`SheetSession.edit`.

All text is HTML-escaped. The markup has no styling and no script; callers
wrap it as they like (`render_page` gives a minimal standalone document).
"""

from html import escape
from typing import List

from sheetround.data.cells import CellKind, CellValue
from sheetround.data.table import Table

INPUT_TYPES = {
    CellKind.STRING: "text",
    CellKind.NUMBER: "number",
    CellKind.DATE: "date",
    CellKind.BOOLEAN: "checkbox",
}


def render_input(row_index: int, column: str, cell: CellValue) -> str:
    """Render the `<input>` for one cell."""
    attrs = [
        f'data-row="{row_index}"',
        f'data-column="{escape(column)}"',
    ]

    if cell.kind is CellKind.BOOLEAN:
        attrs.insert(0, 'type="checkbox"')
        if cell.value:
            attrs.append("checked")
    elif cell.kind is CellKind.DATE and cell.value.time().isoformat() != "00:00:00":
        # Time-of-day dates need the datetime editor
        attrs.insert(0, 'type="datetime-local"')
        attrs.append(f'value="{cell.value.strftime("%Y-%m-%dT%H:%M:%S")}"')
    else:
        attrs.insert(0, f'type="{INPUT_TYPES[cell.kind]}"')
        if cell.kind is CellKind.NUMBER:
            attrs.append('step="any"')
        attrs.append(f'value="{escape(cell.display())}"')

    return f"<input {' '.join(attrs)}>"


def render_table(table: Table) -> str:
    """
    Render the table as an editable `<table>` element.

    Example:
        >>> print(render_table(table))  # doctest: +SKIP
        <table>
          <thead><tr><th>Name</th><th>Index</th></tr></thead>
          ...
    """
    headers = table.headers
    lines: List[str] = ["<table>"]
    lines.append(
        "  <thead><tr>"
        + "".join(f"<th>{escape(header)}</th>" for header in headers)
        + "</tr></thead>"
    )
    lines.append("  <tbody>")
    for row_index, record in enumerate(table.rows()):
        cells = "".join(
            f"<td>{render_input(row_index, header, record[header])}</td>"
            for header in headers
        )
        lines.append(f"    <tr>{cells}</tr>")
    lines.append("  </tbody>")
    lines.append("</table>")
    return "\n".join(lines)


def render_page(table: Table, title: str = "Sheet") -> str:
    """Standalone HTML document with the table and a save button."""
    return "\n".join([
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{escape(title)}</title>",
        "</head>",
        "<body>",
        render_table(table),
        '<button type="button" id="save-file">Save File</button>',
        "</body>",
        "</html>",
        "",
    ])
