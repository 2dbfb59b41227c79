"""Export report presentations to Excel (XLSX).

Building a document (grid + merges + widths) is kept apart from writing the
workbook, so the layout can be checked without opening a file.
"""

import json
import logging
from decimal import Decimal
from io import BytesIO
from typing import Any, Callable

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from src.core.config import settings
from src.core.exceptions import ValidationError
from src.modules.reports.schemas import (
    CellValue,
    ExportOptions,
    GroupedPresentation,
    MergeRange,
    PlainTableColumn,
    SpreadsheetDocument,
    TablePresentation,
)

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Dash placeholders the UI shows for "no data"; spreadsheet cells stay empty instead.
PLACEHOLDERS = ("—", "-")

INDEX_WIDTH = (15, 50)
GROUPED_DATA_WIDTH = (10, 30)
PLAIN_WIDTH = (10, 50)

_SHEET_NAME_MAX = 31
_SHEET_NAME_FORBIDDEN = set("[]:*?/\\")


def _cell_value(v: Any) -> CellValue:
    """Convert value for Excel: None -> "", Decimal -> float, placeholder dashes -> ""."""
    if v is None:
        return ""
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, dict):
        for field in ("name", "shortName", "short_name"):
            if v.get(field) is not None:
                return _cell_value(str(v[field]))
        return json.dumps(v, ensure_ascii=False)
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return v
    text = str(v)
    return "" if text in PLACEHOLDERS else text


def _width(label: str, values: list[CellValue], bounds: tuple[int, int]) -> int:
    lo, hi = bounds
    longest = max([len(label)] + [len(str(v)) for v in values])
    return min(max(longest + 2, lo), hi)


def _lookup(record: dict[str, Any], path: str) -> Any:
    """Value at a dotted path ("career.name"); None when any step is missing."""
    value: Any = record
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
        if value is None:
            return None
    return value


def _validate_sheet_name(name: str) -> str:
    if not name or len(name) > _SHEET_NAME_MAX:
        raise ValidationError(
            f"Sheet name must be 1-{_SHEET_NAME_MAX} characters", field="sheetName"
        )
    if _SHEET_NAME_FORBIDDEN & set(name):
        raise ValidationError(
            "Sheet name cannot contain any of: [ ] : * ? / \\", field="sheetName"
        )
    return name


def _clean_filename(name: str) -> str:
    name = name.strip()
    if name.lower().endswith(".xlsx"):
        name = name[:-5]
    for ch in '"\\/\r\n':
        name = name.replace(ch, "_")
    if not name:
        raise ValidationError("Filename cannot be empty", field="filename")
    return name


def _resolve_target(options: ExportOptions, default_filename: str) -> tuple[str, str]:
    filename = _clean_filename(options.filename or default_filename)
    sheet_name = _validate_sheet_name(options.sheet_name or settings.report_sheet_name)
    return filename, sheet_name


def build_grouped_document(
    model: GroupedPresentation,
    options: ExportOptions | None = None,
) -> SpreadsheetDocument:
    """
    Grouped table -> grid with two header rows.

    Header row 1 repeats each group label in every column the group spans; the
    horizontal merge then shows it once. Header row 2 holds the sub-column labels
    and is never merged. The index column is merged vertically over both header rows.
    """
    options = options or ExportOptions()
    filename, sheet_name = _resolve_target(options, settings.report_default_filename)
    index_label = options.row_index_label or model.row_index_label
    total_columns = 1 + sum(len(group.sub_columns) for group in model.column_groups)

    grid: list[list[CellValue]] = []
    if options.title:
        grid.append([options.title])

    group_header: list[CellValue] = [index_label]
    sub_header: list[CellValue] = [index_label]
    for group in model.column_groups:
        for sub_column in group.sub_columns:
            group_header.append(group.label)
            sub_header.append(sub_column.label)
    grid.append(group_header)
    grid.append(sub_header)

    for row in model.rows:
        line: list[CellValue] = [_cell_value(row.label)]
        for group in model.column_groups:
            group_cells = row.cells.get(group.key, {})
            for sub_column in group.sub_columns:
                line.append(_cell_value(group_cells.get(sub_column.key)))
        grid.append(line)

    merges: list[MergeRange] = []
    if options.title:
        merges.append(MergeRange(start_row=0, start_col=0, end_row=0, end_col=total_columns - 1))
    header_row = 1 if options.title else 0
    merges.append(MergeRange(start_row=header_row, start_col=0, end_row=header_row + 1, end_col=0))
    col = 1
    for group in model.column_groups:
        span = len(group.sub_columns)
        if span > 1:
            merges.append(
                MergeRange(start_row=header_row, start_col=col, end_row=header_row, end_col=col + span - 1)
            )
        col += span

    data_start = header_row + 2
    column_widths = [_width(index_label, [line[0] for line in grid[data_start:]], INDEX_WIDTH)]
    col = 1
    for group in model.column_groups:
        for sub_column in group.sub_columns:
            values = [line[col] for line in grid[data_start:]]
            column_widths.append(_width(sub_column.label, values, GROUPED_DATA_WIDTH))
            col += 1

    return SpreadsheetDocument(
        grid=grid,
        merges=merges,
        column_widths=column_widths,
        sheet_name=sheet_name,
        filename=filename,
    )


def _plain_document(
    labels: list[str],
    rows: list[list[CellValue]],
    options: ExportOptions,
    default_filename: str,
) -> SpreadsheetDocument:
    filename, sheet_name = _resolve_target(options, default_filename)
    grid: list[list[CellValue]] = []
    merges: list[MergeRange] = []
    if options.title:
        grid.append([options.title])
        merges.append(MergeRange(start_row=0, start_col=0, end_row=0, end_col=max(len(labels) - 1, 0)))
    grid.append(list(labels))
    grid.extend(rows)
    column_widths = [
        _width(label, [row[i] for row in rows], PLAIN_WIDTH) for i, label in enumerate(labels)
    ]
    return SpreadsheetDocument(
        grid=grid,
        merges=merges,
        column_widths=column_widths,
        sheet_name=sheet_name,
        filename=filename,
    )


def build_table_document(
    columns: list[PlainTableColumn],
    data: list[dict[str, Any]],
    options: ExportOptions | None = None,
) -> SpreadsheetDocument:
    """Plain table: one header row, one row per record. Column keys may be dotted paths."""
    options = options or ExportOptions()
    rows = [[_cell_value(_lookup(record, column.key)) for column in columns] for record in data]
    return _plain_document(
        [column.label for column in columns], rows, options, settings.report_table_filename
    )


def build_flat_document(
    model: TablePresentation,
    options: ExportOptions | None = None,
) -> SpreadsheetDocument:
    """Flat report table (by generation, by career, summary): index column then metric columns."""
    options = options or ExportOptions()
    index_label = options.row_index_label or model.row_index_label
    labels = [index_label] + [column.label for column in model.columns]
    rows = [
        [_cell_value(row.label)] + [_cell_value(row.values.get(column.key)) for column in model.columns]
        for row in model.rows
    ]
    return _plain_document(labels, rows, options, settings.report_default_filename)


_DOCUMENT_BUILDERS: dict[type, Callable[..., SpreadsheetDocument]] = {
    GroupedPresentation: build_grouped_document,
    TablePresentation: build_flat_document,
}


def build_report_document(
    presentation: GroupedPresentation | TablePresentation,
    options: ExportOptions | None = None,
) -> SpreadsheetDocument:
    fn = _DOCUMENT_BUILDERS.get(type(presentation))
    if not fn:
        raise ValueError(f"Unknown presentation for Excel: {type(presentation).__name__}")
    return fn(presentation, options)


def render_xlsx(document: SpreadsheetDocument) -> bytes:
    """
    Write the document to a single-sheet workbook: literal values, merges, column widths.

    openpyxl keeps only the top-left value of a merged range, so the repeated group
    labels and the second index header stay in `document.grid` but not in the file.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = document.sheet_name
    for i, row in enumerate(document.grid, start=1):
        for j, val in enumerate(row, start=1):
            if val == "":
                continue
            ws.cell(row=i, column=j, value=val)
    for m in document.merges:
        if (m.start_row, m.start_col) == (m.end_row, m.end_col):
            continue
        ws.merge_cells(
            start_row=m.start_row + 1,
            start_column=m.start_col + 1,
            end_row=m.end_row + 1,
            end_column=m.end_col + 1,
        )
    for j, width in enumerate(document.column_widths, start=1):
        ws.column_dimensions[get_column_letter(j)].width = width
    buf = BytesIO()
    wb.save(buf)
    logger.info(
        "Rendered %s.xlsx (%d rows, %d merges)",
        document.filename,
        len(document.grid),
        len(document.merges),
    )
    return buf.getvalue()
