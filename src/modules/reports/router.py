"""API for graduation reports: presentation models and XLSX export."""

from urllib.parse import quote

from fastapi import APIRouter, Response

from src.modules.reports.excel_export import (
    XLSX_MEDIA_TYPE,
    build_report_document,
    build_table_document,
    render_xlsx,
)
from src.modules.reports.schemas import (
    PresentationResponse,
    ReportExportRequest,
    ReportPresentationRequest,
    ReportRequest,
    ReportRequestResponse,
    ReportShape,
    SpreadsheetDocument,
    TableExportRequest,
)
from src.modules.reports.service import build_presentation, parse_report_payload
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


def _content_disposition(filename: str) -> str:
    """Attachment header: ASCII fallback name plus the UTF-8 name in filename*."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _xlsx_response(document: SpreadsheetDocument) -> Response:
    return Response(
        content=render_xlsx(document),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(f"{document.filename}.xlsx")},
    )


@router.post(
    "/config",
    response_model=ApiResponse[ReportRequestResponse],
)
async def normalize_report_request(
    body: ReportRequest,
    report_shape: ReportShape = ReportShape.GROUPED,
):
    """
    Validate a report request and derive the ReportConfig the transforms take.

    Legacy startYear/endYear/careerIds fields are folded into dateRange/careers.
    """
    return ApiResponse(
        data=ReportRequestResponse(request=body, config=body.to_config(report_shape))
    )


@router.post(
    "/presentation",
    response_model=ApiResponse[PresentationResponse],
)
async def get_presentation(body: ReportPresentationRequest):
    """
    Reshape a backend report payload into the grouped or flat table model.

    Without `config` the payload metadata (graduationRateDenominator, includeOtherValue)
    decides the columns.
    """
    payload = parse_report_payload(body.report)
    return ApiResponse(data=build_presentation(payload, body.config))


@router.post("/export")
async def export_report(body: ReportExportRequest):
    """Reshape a report payload and download it as a single-sheet XLSX workbook."""
    payload = parse_report_payload(body.report)
    result = build_presentation(payload, body.config)
    document = build_report_document(result.presentation, body.options)
    return _xlsx_response(document)


@router.post("/export/table")
async def export_table(body: TableExportRequest):
    """Download any column/record table as XLSX (dotted column keys read nested fields)."""
    document = build_table_document(body.columns, body.data, body.options)
    return _xlsx_response(document)
