from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class ReportShapeMismatchError(AppException):
    """Report payload does not have the table shape the caller asked for."""

    def __init__(self, expected: str, received: str):
        message = f"Expected report with tableType={expected}, received tableType={received}"
        super().__init__(
            message=message,
            status_code=422,
            details={"field": "tableType", "expected": expected, "received": received},
        )


class UnsupportedReportError(AppException):
    """(type, tableType) combination that no transform accepts."""

    def __init__(self, report_type: str, table_type: str):
        message = f"Unsupported report: type={report_type}, tableType={table_type}"
        super().__init__(
            message=message,
            status_code=422,
            details={"field": "type", "type": report_type, "tableType": table_type},
        )
