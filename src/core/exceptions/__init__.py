from src.core.exceptions.base import (
    AppException,
    ValidationError,
    ReportShapeMismatchError,
    UnsupportedReportError,
)

__all__ = [
    "AppException",
    "ValidationError",
    "ReportShapeMismatchError",
    "UnsupportedReportError",
]
