"""Schemas for graduation reports: backend payloads, report config, presentation models."""

from enum import StrEnum
from typing import Any, Literal, Union

from pydantic import ConfigDict, Field, NonNegativeInt, model_validator

from src.shared.schemas.base import BaseSchema, CamelSchema


class Denominator(StrEnum):
    """Metric the graduation-rate percentage is divided by."""

    INGRESO = "ingreso"
    EGRESO = "egreso"

    @property
    def other(self) -> "Denominator":
        return Denominator.EGRESO if self is Denominator.INGRESO else Denominator.INGRESO


class ReportShape(StrEnum):
    """Payload `tableType`."""

    GROUPED = "grouped"
    TABLE = "table"
    SUMMARY = "summary"


class GroupBy(StrEnum):
    GENERATION = "generation"
    CAREER = "career"


class ReportType(StrEnum):
    """Payload `type` as sent by the aggregation backend."""

    POR_GENERACIONES = "por-generaciones"
    POR_CARRERAS = "por-carreras"

    @property
    def group_by(self) -> GroupBy:
        if self is ReportType.POR_CARRERAS:
            return GroupBy.CAREER
        return GroupBy.GENERATION

    @classmethod
    def for_group_by(cls, group_by: GroupBy) -> "ReportType":
        if group_by is GroupBy.CAREER:
            return cls.POR_CARRERAS
        return cls.POR_GENERACIONES


CellValue = Union[int, float, str]


# --- Backend payload ---


class MetricSet(CamelSchema):
    """One aggregate cell. Counts the backend omitted stay None."""

    model_config = ConfigDict(frozen=True)

    ingreso: int | None = Field(None, ge=0)
    egreso: int | None = Field(None, ge=0)
    titulados: int | None = Field(None, ge=0)
    porcentaje: float | None = None  # titulados / denominator * 100, when the backend computed it

    def count(self, metric: str) -> int:
        """Count for arithmetic; a missing value counts as 0."""
        return getattr(self, metric) or 0


class ReportGeneration(CamelSchema):
    id: str
    name: str
    start_year: str | None = None
    end_year: str | None = None


class ReportCareer(CamelSchema):
    id: str
    name: str
    short_name: str


class ReportMetadata(CamelSchema):
    """Metadata common to every payload shape."""

    graduation_rate_denominator: Denominator
    include_other_value: bool = False
    start_year: int | None = None
    end_year: int | None = None
    career_ids: list[str] | None = None
    generated_at: str | None = None


class GroupedReportPayload(CamelSchema):
    """Generation x career matrix. data[generationId] = {careerId: MetricSet, 'totales': MetricSet}."""

    type: Literal["por-generaciones"]
    table_type: Literal["grouped"]
    metadata: ReportMetadata
    data: dict[str, dict[str, MetricSet]]
    generations: list[ReportGeneration]
    careers: list[ReportCareer]
    totals_by_generation: dict[str, MetricSet] | None = None
    totals_by_career: dict[str, MetricSet] | None = None
    grand_total: MetricSet | None = None


class GenerationTableRow(CamelSchema):
    generation_id: str
    generation: ReportGeneration
    ingreso: int | None = Field(None, ge=0)
    egreso: int | None = Field(None, ge=0)
    titulados: int = Field(0, ge=0)
    porcentaje: float | None = None


class GenerationsTablePayload(CamelSchema):
    """One row per generation, all careers collapsed."""

    type: Literal["por-generaciones"]
    table_type: Literal["table"]
    metadata: ReportMetadata
    data: list[GenerationTableRow]
    grand_total: MetricSet


class CareerTableRow(CamelSchema):
    career_id: str
    career: ReportCareer
    values_by_generation: dict[str, NonNegativeInt] = {}  # generationId -> titulados
    ingreso: int | None = Field(None, ge=0)
    egreso: int | None = Field(None, ge=0)
    titulados: int = Field(0, ge=0)
    porcentaje: float | None = None


class CareersTablePayload(CamelSchema):
    """One row per career, titulados per generation as informational columns."""

    type: Literal["por-carreras"]
    table_type: Literal["table"]
    metadata: ReportMetadata
    data: list[CareerTableRow]
    generations: list[ReportGeneration]
    grand_total: MetricSet


class SummaryPayload(CamelSchema):
    """Single aggregate over all generations and careers."""

    type: Literal["por-generaciones", "por-carreras"]
    table_type: Literal["summary"]
    metadata: ReportMetadata
    data: MetricSet


ReportPayload = Union[
    GroupedReportPayload,
    GenerationsTablePayload,
    CareersTablePayload,
    SummaryPayload,
]


# --- Report configuration ---


class ReportConfig(BaseSchema):
    """Explicit report configuration; never read from ambient state."""

    denominator: Denominator = Denominator.EGRESO
    include_other_value: bool = False
    report_shape: ReportShape = ReportShape.GROUPED
    group_by: GroupBy = GroupBy.GENERATION

    @classmethod
    def from_payload(cls, payload: ReportPayload) -> "ReportConfig":
        return cls(
            denominator=payload.metadata.graduation_rate_denominator,
            include_other_value=payload.metadata.include_other_value,
            report_shape=ReportShape(payload.table_type),
            group_by=ReportType(payload.type).group_by,
        )


class DateRange(CamelSchema):
    type: Literal["general", "specific"] = "general"
    start_year: int | None = None
    end_year: int | None = None


class CareerSelection(CamelSchema):
    type: Literal["general", "specific"] = "general"
    selected: list[str] = []


class ReportRequest(CamelSchema):
    """Report generation request as built by the report configuration screen."""

    date_range: DateRange = Field(default_factory=DateRange)
    careers: CareerSelection = Field(default_factory=CareerSelection)
    graduation_rate_denominator: Denominator = Denominator.EGRESO
    include_other_value: bool = False
    report_type: ReportType = ReportType.POR_GENERACIONES
    sex: Literal["general", "MASCULINO", "FEMENINO"] = "general"

    # Legacy flat format, folded into date_range / careers
    start_year: int | None = Field(None, exclude=True)
    end_year: int | None = Field(None, exclude=True)
    career_ids: list[str] | None = Field(None, exclude=True)

    @model_validator(mode="after")
    def fold_legacy_fields(self) -> "ReportRequest":
        if self.start_year is not None and self.end_year is not None and self.date_range.type == "general":
            self.date_range = DateRange(type="specific", start_year=self.start_year, end_year=self.end_year)
        if self.career_ids and self.careers.type == "general":
            self.careers = CareerSelection(type="specific", selected=list(self.career_ids))
        self.start_year = self.end_year = self.career_ids = None

        if self.date_range.type == "specific":
            start, end = self.date_range.start_year, self.date_range.end_year
            if start is None or end is None:
                raise ValueError("dateRange.startYear and dateRange.endYear are required for a specific range")
            if start > end:
                raise ValueError("dateRange.startYear must be <= dateRange.endYear")
        else:
            self.date_range = DateRange()
        if self.careers.type == "general":
            self.careers = CareerSelection()
        return self

    def to_config(self, report_shape: ReportShape = ReportShape.GROUPED) -> ReportConfig:
        return ReportConfig(
            denominator=self.graduation_rate_denominator,
            include_other_value=self.include_other_value,
            report_shape=report_shape,
            group_by=self.report_type.group_by,
        )


# --- Presentation model ---


class SubColumn(BaseSchema):
    key: str
    label: str
    align: Literal["left", "center", "right"] = "right"


class ColumnGroup(BaseSchema):
    key: str
    label: str
    sub_columns: list[SubColumn]


class PresentationRow(BaseSchema):
    """cells[group_key][sub_column_key]; an absent group means no data for that pair."""

    key: str
    label: str
    cells: dict[str, dict[str, CellValue]] = {}


class GroupedPresentation(BaseSchema):
    row_index_label: str
    column_groups: list[ColumnGroup]
    rows: list[PresentationRow]


class TableColumn(BaseSchema):
    key: str
    label: str
    align: Literal["left", "center", "right"] = "right"


class TableRow(BaseSchema):
    key: str
    label: str
    values: dict[str, CellValue] = {}


class TablePresentation(BaseSchema):
    """Flat table: the index column plus a single ungrouped column set."""

    row_index_label: str
    columns: list[TableColumn]
    rows: list[TableRow]


Presentation = Union[GroupedPresentation, TablePresentation]


class PresentationResponse(BaseSchema):
    config: ReportConfig
    kind: Literal["grouped", "table"]
    presentation: Presentation


# --- Spreadsheet ---


class MergeRange(BaseSchema):
    """0-based, inclusive cell range."""

    model_config = ConfigDict(frozen=True)

    start_row: int
    start_col: int
    end_row: int
    end_col: int


class SpreadsheetDocument(BaseSchema):
    model_config = ConfigDict(frozen=True)

    grid: list[list[CellValue]]
    merges: list[MergeRange]
    column_widths: list[int]
    sheet_name: str = "Datos"
    filename: str = "reporte"


class ExportOptions(CamelSchema):
    title: str | None = None
    row_index_label: str | None = None  # overrides the presentation's index label
    filename: str | None = None  # without extension
    sheet_name: str | None = None


class ReportExportRequest(CamelSchema):
    report: dict[str, Any]  # one of the ReportPayload shapes, parsed by the service
    config: ReportConfig | None = None
    options: ExportOptions = Field(default_factory=ExportOptions)


class ReportPresentationRequest(CamelSchema):
    report: dict[str, Any]
    config: ReportConfig | None = None


class PlainTableColumn(CamelSchema):
    key: str  # dotted path into each record, e.g. "career.name"
    label: str


class TableExportRequest(CamelSchema):
    columns: list[PlainTableColumn]
    data: list[dict[str, Any]]
    options: ExportOptions = Field(default_factory=ExportOptions)


class ReportRequestResponse(BaseSchema):
    request: ReportRequest
    config: ReportConfig
