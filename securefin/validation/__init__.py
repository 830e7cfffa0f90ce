"""Validation package."""

from securefin.validation.validator import (
    TransactionValidator,
    validate_mobile,
    validate_name,
)

__all__ = ["TransactionValidator", "validate_mobile", "validate_name"]
