"""
Pydantic schemas for API request/response models.
"""

from conatus.schemas.automation import (
    ExpressionRequest,
    ValidateRequest,
    EvaluateRequest,
    ShouldRunRequest,
    OperatorResponse,
    ValidationIssueResponse,
    ValidationResponse,
    EvaluateResponse,
    PreviewResponse,
    ShouldRunResponse,
)

__all__ = [
    "ExpressionRequest",
    "ValidateRequest",
    "EvaluateRequest",
    "ShouldRunRequest",
    "OperatorResponse",
    "ValidationIssueResponse",
    "ValidationResponse",
    "EvaluateResponse",
    "PreviewResponse",
    "ShouldRunResponse",
]
