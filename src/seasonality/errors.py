"""Seasonality engine error types."""

from __future__ import annotations

from enum import Enum


class SeasonalityErrorCode(Enum):
    """Error classification codes."""

    FETCH_FAILED = "fetch_failed"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    MALFORMED_RECORD = "malformed_record"
    DUPLICATE_DATE = "duplicate_date"
    ALIGNMENT_MISMATCH = "alignment_mismatch"
    NO_DATA = "no_data"


class SeasonalityError(Exception):
    """Engine exception with error code and retryable flag.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether re-triggering the same load may succeed.
    """

    def __init__(
        self,
        message: str,
        code: SeasonalityErrorCode = SeasonalityErrorCode.FETCH_FAILED,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
