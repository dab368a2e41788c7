"""
Error response schemas for API documentation and consistent error formatting.
Provides standardized error response models for OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["email"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid email format"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["value_error"]
    )

    input: Optional[Any] = Field(
        None,
        description="Input value that caused the error"
    )


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message", examples=["Request validation failed"])
    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2024-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking", examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Detailed error information for validation errors"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _error_example(description: str, code: str, message: str) -> Dict[str, Any]:
    return {
        "description": description,
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": code,
                        "message": message,
                        "timestamp": "2024-01-01T00:00:00Z",
                        "request_id": "abc12345"
                    }
                }
            }
        }
    }


# Common error response examples for documentation
COMMON_ERROR_RESPONSES = {
    400: _error_example("Bad Request - Invalid request parameters", "BAD_REQUEST", "Email is taken"),
    401: _error_example("Unauthorized - Authentication required", "UNAUTHORIZED", "Authentication required"),
    403: _error_example("Forbidden - Not the owner of this resource", "FORBIDDEN", "You don't own this hotel"),
    404: _error_example("Not Found - Resource does not exist", "NOT_FOUND", "Hotel not found"),
    409: _error_example("Conflict - Data integrity violation", "INTEGRITY_ERROR", "Duplicate value for unique field"),
    422: _error_example("Validation Error - Invalid request body", "VALIDATION_ERROR", "Request validation failed"),
    500: _error_example("Internal Server Error", "INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    502: _error_example("Bad Gateway - Payment provider failed", "PAYMENT_PROVIDER_ERROR", "No such account"),
    503: _error_example("Service Unavailable", "SERVICE_UNAVAILABLE", "Service temporarily unavailable"),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 422, 500)


def get_payment_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for payment provider operations."""
    return get_error_responses(400, 401, 404, 502, 503)
