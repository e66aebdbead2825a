"""
Validation helpers for form and JSON payloads.
Multipart forms arrive as strings; these helpers coerce them and raise
ValidationError (400) with a readable message on bad input.
"""

import json
import uuid
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from app.utils.exceptions import ValidationError

EnumType = TypeVar("EnumType", bound=Enum)

# Integer columns are 32-bit; prices are NUMERIC(14, 2)
MAX_INTEGER_DIGITS = 9
MAX_DECIMAL_DIGITS = 12


class ValidationUtils:
    """
    Utility class for coercing raw request values.
    Empty strings count as missing everywhere.
    """

    @staticmethod
    def _too_many_digits(value: Decimal, max_digits: int) -> bool:
        """True when a finite value is written with more than max_digits integer digits."""
        return value.adjusted() >= max_digits

    @staticmethod
    def is_blank(value: Any) -> bool:
        """True for None and whitespace-only strings."""
        return value is None or (isinstance(value, str) and not value.strip())

    @classmethod
    def require_fields(cls, data: Dict[str, Any], fields: Iterable[str], message: Optional[str] = None) -> None:
        """
        Reject payloads with missing required fields.

        Args:
            data: Raw payload
            fields: Required field names
            message: Error message, defaults to one listing the missing fields

        Raises:
            ValidationError: If any required field is blank
        """
        missing = [field for field in fields if cls.is_blank(data.get(field))]
        if missing:
            raise ValidationError(
                message or f"Missing required fields: {', '.join(missing)}",
                field_errors=[{"field": field, "message": "Field is required"} for field in missing]
            )

    @staticmethod
    def validate_uuid(value: Any, field_name: str = "id") -> uuid.UUID:
        """
        Validate UUID format.

        Raises:
            ValidationError: If the value is not a UUID
        """
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value))
        except (ValueError, TypeError, AttributeError):
            raise ValidationError(f"Invalid {field_name}")

    @classmethod
    def validate_integer(
        cls,
        value: Any,
        field_name: str,
        min_value: Optional[int] = None,
        default: Optional[int] = None
    ) -> Optional[int]:
        """
        Validate integer value.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            min_value: Minimum allowed value
            default: Returned when the value is blank

        Returns:
            Valid integer, or the default

        Raises:
            ValidationError: If integer is invalid
        """
        if cls.is_blank(value):
            return default

        try:
            decimal_value = Decimal(str(value).strip())
            if not decimal_value.is_finite() or decimal_value != decimal_value.to_integral_value():
                raise ValueError(value)
            if cls._too_many_digits(decimal_value, MAX_INTEGER_DIGITS):
                raise ValidationError(f"{field_name} is too large")
            int_value = int(decimal_value)
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid integer")

        if min_value is not None and int_value < min_value:
            raise ValidationError(f"{field_name} cannot be negative" if min_value == 0 else f"{field_name} must be at least {min_value}")

        return int_value

    @classmethod
    def validate_decimal(
        cls,
        value: Any,
        field_name: str,
        min_value: Optional[Decimal] = None,
        default: Optional[Decimal] = None
    ) -> Optional[Decimal]:
        """
        Validate decimal value.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            min_value: Minimum allowed value
            default: Returned when the value is blank

        Returns:
            Valid Decimal, or the default

        Raises:
            ValidationError: If decimal is invalid
        """
        if cls.is_blank(value):
            return default

        try:
            decimal_value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid number")

        if not decimal_value.is_finite():
            raise ValidationError(f"{field_name} must be a valid number")

        if cls._too_many_digits(decimal_value, MAX_DECIMAL_DIGITS):
            raise ValidationError(f"{field_name} is too large")

        if min_value is not None and decimal_value < min_value:
            raise ValidationError(f"{field_name} cannot be negative" if min_value == 0 else f"{field_name} must be at least {min_value}")

        return decimal_value

    @classmethod
    def validate_enum(cls, value: Any, enum_type: Type[EnumType], field_name: str) -> Optional[EnumType]:
        """
        Validate a value against an enum's values.

        Returns:
            Enum member, or None when blank

        Raises:
            ValidationError: If the value is not a member
        """
        if cls.is_blank(value):
            return None
        try:
            return enum_type(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            raise ValidationError(f"Invalid {field_name}. Allowed values: {allowed}")

    @staticmethod
    def parse_json_list(value: Optional[str], field_name: str) -> List[str]:
        """
        Parse a JSON array of strings sent as a form field.

        Raises:
            ValidationError: If the value is not a JSON array
        """
        if value is None or value == "":
            return []
        try:
            parsed = json.loads(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} must be a JSON array")

        if not isinstance(parsed, list):
            raise ValidationError(f"{field_name} must be a JSON array")

        return [str(item) for item in parsed]
