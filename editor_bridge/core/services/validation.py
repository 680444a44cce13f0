"""
ValidationEngine - length and presence constraints over the editor text.

Key behaviors:
- Rules are evaluated independently; every violation is reported
- min_length does not fire on an empty document (that is `required`'s job)
- Zero or unset limits are inactive
- A missing engine yields a NOT_READY verdict, distinct from VALID
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

ValidationErrors = dict[str, dict[str, Any]]

MIN_LENGTH_ERROR = "minLengthError"
MAX_LENGTH_ERROR = "maxLengthError"
REQUIRED_ERROR = "requiredError"


@dataclass(frozen=True)
class LengthConstraints:
    min_length: int | None = None
    max_length: int | None = None
    required: bool = False


def validate_length(
    text_length: int,
    constraints: LengthConstraints,
) -> ValidationErrors | None:
    """
    Check a trimmed text length against the constraints.

    Returns None if valid, otherwise a mapping of rule name to detail.
    """
    errors: ValidationErrors = {}

    if constraints.min_length and text_length and text_length < constraints.min_length:
        errors[MIN_LENGTH_ERROR] = {
            "given": text_length,
            "minLength": constraints.min_length,
        }

    if constraints.max_length and text_length > constraints.max_length:
        errors[MAX_LENGTH_ERROR] = {
            "given": text_length,
            "maxLength": constraints.max_length,
        }

    if constraints.required and not text_length:
        errors[REQUIRED_ERROR] = {"empty": True}

    return errors or None


class VerdictStatus(Enum):
    NOT_READY = "not_ready"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class ValidationVerdict:
    """Three-state validation outcome."""

    status: VerdictStatus
    errors: ValidationErrors | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is VerdictStatus.VALID

    def as_form_result(self) -> ValidationErrors | None:
        """Collapse to the form-protocol shape (None unless invalid)."""
        return self.errors if self.status is VerdictStatus.INVALID else None


NOT_READY = ValidationVerdict(VerdictStatus.NOT_READY)


def evaluate(text: str | None, constraints: LengthConstraints) -> ValidationVerdict:
    """Validate the engine text, or report NOT_READY when there is no engine."""
    if text is None:
        return NOT_READY

    errors = validate_length(len(text.strip()), constraints)
    if errors is None:
        return ValidationVerdict(VerdictStatus.VALID)
    return ValidationVerdict(VerdictStatus.INVALID, errors)
