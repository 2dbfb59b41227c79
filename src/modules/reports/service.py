"""Reshape graduation report payloads into presentation models (grouped matrix or flat table)."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import ReportShapeMismatchError, UnsupportedReportError, ValidationError
from src.modules.reports.metric_policy import (
    PORCENTAJE,
    TITULADOS,
    sub_columns_for,
    table_columns_for,
)
from src.modules.reports.percentage import resolve_percentage
from src.modules.reports.schemas import (
    CareersTablePayload,
    ColumnGroup,
    Denominator,
    GenerationsTablePayload,
    GroupedPresentation,
    GroupedReportPayload,
    MetricSet,
    PresentationResponse,
    PresentationRow,
    ReportConfig,
    ReportPayload,
    ReportShape,
    ReportType,
    SubColumn,
    SummaryPayload,
    TableColumn,
    TablePresentation,
    TableRow,
)

logger = logging.getLogger(__name__)

TOTALS_KEY = "totales"
TOTAL_ROW_KEY = "total"
TOTAL_LABEL = "TOTAL"

GROUPED_INDEX_LABEL = "POR COHORTE"
GENERATIONS_INDEX_LABEL = "Generación"
CAREERS_INDEX_LABEL = "Carrera"

_PAYLOAD_MODELS: dict[tuple[str, str], type] = {
    ("grouped", "por-generaciones"): GroupedReportPayload,
    ("table", "por-generaciones"): GenerationsTablePayload,
    ("table", "por-carreras"): CareersTablePayload,
    ("summary", "por-generaciones"): SummaryPayload,
    ("summary", "por-carreras"): SummaryPayload,
}


def parse_report_payload(raw: dict[str, Any]) -> ReportPayload:
    """
    Validate a raw backend response against the model for its (tableType, type).

    Only the four known shapes are accepted; anything else fails instead of being guessed.
    """
    table_type = raw.get("tableType", raw.get("table_type"))
    report_type = raw.get("type")
    if table_type is None:
        raise ValidationError("Report payload has no tableType", field="tableType")
    model = None
    if isinstance(table_type, str) and isinstance(report_type, str):
        model = _PAYLOAD_MODELS.get((table_type, report_type))
    if model is None:
        raise UnsupportedReportError(str(report_type), str(table_type))
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid {table_type} report payload: {first.get('msg', 'Invalid value')}",
            field=field,
        ) from exc


def _expect(payload: ReportPayload, model: type, shape: ReportShape, report_type: ReportType | None = None) -> None:
    if isinstance(payload, model):
        return
    received = str(getattr(payload, "table_type", type(payload).__name__))
    expected = shape.value
    if report_type is not None:
        expected = f"{expected} ({report_type.value})"
        received = f"{received} ({getattr(payload, 'type', None)})"
    raise ReportShapeMismatchError(expected=expected, received=received)


def _metric_cells(metrics: MetricSet, columns: list[SubColumn] | list[TableColumn], denominator: Denominator) -> dict:
    cells: dict[str, int | str] = {}
    for column in columns:
        if column.key == PORCENTAJE:
            cells[column.key] = resolve_percentage(metrics, denominator)
        else:
            cells[column.key] = metrics.count(column.key)
    return cells


def _table_values(metrics: MetricSet, columns: list[TableColumn], denominator: Denominator) -> dict:
    """Flat-table metric values; a count the backend left out stays blank."""
    values: dict[str, int | str] = {}
    for column in columns:
        if column.key == PORCENTAJE:
            values[column.key] = resolve_percentage(metrics, denominator)
        elif column.key == TITULADOS:
            values[column.key] = metrics.count(TITULADOS)
        elif getattr(metrics, column.key) is not None:
            values[column.key] = getattr(metrics, column.key)
    return values


def _row_metrics(row) -> MetricSet:
    return MetricSet(
        ingreso=row.ingreso,
        egreso=row.egreso,
        titulados=row.titulados,
        porcentaje=row.porcentaje,
    )


def build_grouped(payload: GroupedReportPayload, config: ReportConfig) -> GroupedPresentation:
    """
    Generation x career matrix: one column group per career plus `totales`, one row per generation.

    A career with no data for a generation gets no cell entry (the table shows a dash).
    """
    _expect(payload, GroupedReportPayload, ReportShape.GROUPED)

    column_groups = [
        ColumnGroup(
            key=career.id,
            label=career.short_name.upper(),
            sub_columns=sub_columns_for(config, totals_only=False),
        )
        for career in payload.careers
    ]
    column_groups.append(
        ColumnGroup(
            key=TOTALS_KEY,
            label="TOTALES",
            sub_columns=sub_columns_for(config, totals_only=True),
        )
    )
    group_columns = {group.key: group.sub_columns for group in column_groups}

    rows: list[PresentationRow] = []
    for generation in payload.generations:
        generation_data = payload.data.get(generation.id, {})
        cells: dict[str, dict] = {}
        for career in payload.careers:
            metrics = generation_data.get(career.id)
            if metrics is not None:
                cells[career.id] = _metric_cells(metrics, group_columns[career.id], config.denominator)
        totals = generation_data.get(TOTALS_KEY)
        if totals is not None:
            cells[TOTALS_KEY] = _metric_cells(totals, group_columns[TOTALS_KEY], config.denominator)
        rows.append(
            PresentationRow(key=generation.id, label=generation.name.upper(), cells=cells)
        )

    return GroupedPresentation(
        row_index_label=GROUPED_INDEX_LABEL,
        column_groups=column_groups,
        rows=rows,
    )


def build_generations_table(payload: GenerationsTablePayload, config: ReportConfig) -> TablePresentation:
    """One row per generation (all careers collapsed) plus a TOTAL row from the grand total."""
    _expect(payload, GenerationsTablePayload, ReportShape.TABLE, ReportType.POR_GENERACIONES)

    columns = table_columns_for(config, "generation")
    rows = [
        TableRow(
            key=row.generation_id,
            label=row.generation.name,
            values=_table_values(_row_metrics(row), columns, config.denominator),
        )
        for row in payload.data
    ]
    rows.append(
        TableRow(
            key=TOTAL_ROW_KEY,
            label=TOTAL_LABEL,
            values=_table_values(payload.grand_total, columns, config.denominator),
        )
    )
    return TablePresentation(row_index_label=GENERATIONS_INDEX_LABEL, columns=columns, rows=rows)


def generation_column_key(generation_id: str) -> str:
    return f"valuesByGeneration.{generation_id}"


def build_careers_table(payload: CareersTablePayload, config: ReportConfig) -> TablePresentation:
    """
    One row per career: titulados per generation, then the career's own totals.

    The TOTAL row sums each generation column over all careers and takes the
    metric columns from the grand total.
    """
    _expect(payload, CareersTablePayload, ReportShape.TABLE, ReportType.POR_CARRERAS)

    generation_columns = [
        TableColumn(key=generation_column_key(generation.id), label=generation.name, align="right")
        for generation in payload.generations
    ]
    metric_columns = table_columns_for(config, "totals")

    rows: list[TableRow] = []
    generation_totals = {generation.id: 0 for generation in payload.generations}
    for row in payload.data:
        values: dict[str, int | str] = {}
        for generation in payload.generations:
            titulados = row.values_by_generation.get(generation.id) or 0
            values[generation_column_key(generation.id)] = titulados
            generation_totals[generation.id] += titulados
        values.update(_table_values(_row_metrics(row), metric_columns, config.denominator))
        rows.append(TableRow(key=row.career_id, label=row.career.name, values=values))

    total_values: dict[str, int | str] = {
        generation_column_key(generation_id): total
        for generation_id, total in generation_totals.items()
    }
    total_values.update(_table_values(payload.grand_total, metric_columns, config.denominator))
    rows.append(TableRow(key=TOTAL_ROW_KEY, label=TOTAL_LABEL, values=total_values))

    return TablePresentation(
        row_index_label=CAREERS_INDEX_LABEL,
        columns=generation_columns + metric_columns,
        rows=rows,
    )


def build_summary(payload: SummaryPayload, config: ReportConfig) -> TablePresentation:
    """Single TOTAL row over every generation and career."""
    _expect(payload, SummaryPayload, ReportShape.SUMMARY)

    columns = table_columns_for(config, "totals")
    row = TableRow(
        key=TOTAL_ROW_KEY,
        label=TOTAL_LABEL,
        values=_table_values(payload.data, columns, config.denominator),
    )
    return TablePresentation(row_index_label="", columns=columns, rows=[row])


def _check_config(payload: ReportPayload, config: ReportConfig) -> None:
    received_shape = ReportShape(payload.table_type)
    if config.report_shape != received_shape:
        raise ReportShapeMismatchError(expected=config.report_shape.value, received=received_shape.value)
    if received_shape == ReportShape.TABLE:
        received_group_by = ReportType(payload.type).group_by
        if config.group_by != received_group_by:
            raise ReportShapeMismatchError(
                expected=f"{received_shape.value} ({ReportType.for_group_by(config.group_by).value})",
                received=f"{received_shape.value} ({payload.type})",
            )


def build_presentation(payload: ReportPayload, config: ReportConfig | None = None) -> PresentationResponse:
    """
    Pick the transform for the payload's shape.

    Without an explicit config the payload metadata decides the metrics shown.
    A config whose shape disagrees with the payload is rejected.
    """
    if config is None:
        config = ReportConfig.from_payload(payload)
    else:
        _check_config(payload, config)

    if isinstance(payload, GroupedReportPayload):
        presentation = build_grouped(payload, config)
        kind = "grouped"
    elif isinstance(payload, GenerationsTablePayload):
        presentation = build_generations_table(payload, config)
        kind = "table"
    elif isinstance(payload, CareersTablePayload):
        presentation = build_careers_table(payload, config)
        kind = "table"
    elif isinstance(payload, SummaryPayload):
        presentation = build_summary(payload, config)
        kind = "table"
    else:
        raise UnsupportedReportError(str(getattr(payload, "type", None)), str(getattr(payload, "table_type", None)))

    logger.info(
        "Built %s report presentation (denominator=%s, include_other_value=%s, rows=%d)",
        config.report_shape.value,
        config.denominator.value,
        config.include_other_value,
        len(presentation.rows),
    )
    return PresentationResponse(config=config, kind=kind, presentation=presentation)
