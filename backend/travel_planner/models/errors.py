"""Error response models.

Every failed API call answers with ``{"success": false, "error": AppError}``.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_REJECTED = "UPSTREAM_REJECTED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_MALFORMED = "UPSTREAM_MALFORMED"
    API_ERROR = "API_ERROR"


class RecoveryOption(BaseModel):
    """An action the client can offer the user after an error."""

    label: str
    action: str


class AppError(BaseModel):
    """Error body returned to API clients."""

    code: ErrorCode
    message: str = Field(..., description="Technical description of the error")
    user_message: str = Field(..., description="Message safe to show to end users")
    recovery_options: Optional[list[RecoveryOption]] = None
