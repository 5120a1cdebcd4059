"""
Exception hierarchy for creative generation.

Request problems raise ValidationError before any backend is called.
Per-task failures are BackendError and are folded into the result's
error list by the orchestrator; they never reach the caller.
"""

from typing import Optional, Dict, Any, List, TYPE_CHECKING

if TYPE_CHECKING:
    from models import CreativeResult


class GenerationError(Exception):
    """Base exception for all generation errors"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [self.message]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


class ValidationError(GenerationError):
    """Request failed validation; nothing was dispatched"""
    pass


class BackendError(GenerationError):
    """A single generation task failed, timed out or returned an error"""

    def __init__(self, format_name: str, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.format_name = format_name

    def as_result_error(self) -> str:
        return f"Failed to generate {self.format_name}: {self.message}"


class AggregationFailure(GenerationError):
    """Every dispatched task failed"""

    def __init__(self, result: "CreativeResult"):
        super().__init__("Failed to generate any content")
        self.result = result

    @property
    def errors(self) -> List[str]:
        return list(self.result.errors)


class ParseError(GenerationError):
    """Upstream model output could not be parsed into the expected structure"""

    def __init__(self, message: str, raw_output: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.raw_output = raw_output


class RunCancelled(GenerationError):
    """Run was superseded by a newer run for the same session"""
    pass
