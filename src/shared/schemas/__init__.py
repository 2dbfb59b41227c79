from src.shared.schemas.base import (
    ApiResponse,
    BaseSchema,
    CamelSchema,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
)

__all__ = [
    "ApiResponse",
    "BaseSchema",
    "CamelSchema",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
]
