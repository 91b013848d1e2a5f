#!/usr/bin/env python3
"""
Error taxonomy for the recipe scaling engine.

Per-ingredient problems (parse and conversion errors) are recovered locally
and carried on the result objects. Invalid top-level input (serving counts,
recipe structure) is raised before any ingredient is touched.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCategory(Enum):
    VALIDATION = "validation"
    PARSING = "parsing"
    CONVERSION = "conversion"


class ScalingError(Exception):
    """Base exception for recipe scaling errors."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 category: ErrorCategory = ErrorCategory.VALIDATION):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.severity = severity
        self.category = category
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
        }


class IngredientParseError(ScalingError):
    """An ingredient entry could not be decomposed into quantity/unit/name."""

    def __init__(self, message: str, original: Any = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        super().__init__(message, category=ErrorCategory.PARSING,
                         details={"original": repr(original)}, **kwargs)
        self.original = original


class UnitConversionError(ScalingError):
    """A unit token is not in the conversion table."""

    def __init__(self, message: str, unit: Optional[str] = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        super().__init__(message, category=ErrorCategory.CONVERSION,
                         details={"unit": unit}, **kwargs)
        self.unit = unit


class InvalidScaleFactorError(ScalingError):
    """Serving counts (and so the scale factor) are outside the accepted bounds."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, category=ErrorCategory.VALIDATION, **kwargs)


class InvalidRecipeError(ScalingError):
    """The recipe payload itself is malformed."""

    def __init__(self, message: str, validation_errors: list = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, category=ErrorCategory.VALIDATION,
                         details={"validation_errors": validation_errors or []}, **kwargs)
        self.validation_errors = validation_errors or []
