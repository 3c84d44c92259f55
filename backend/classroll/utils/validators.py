"""Validation utilities for the application."""
import re
from datetime import date, time
from typing import Any, Dict, List

from classroll.exceptions import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        return bool(re.match(EMAIL_PATTERN, email))

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_name(name: str) -> Dict[str, Any]:
        """Validate user name."""
        errors = []

        if not name or not name.strip():
            errors.append("Name is required")
        elif len(name.strip()) < 2:
            errors.append("Name must be at least 2 characters long")
        elif len(name.strip()) > 100:
            errors.append("Name is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def require_fields(data: Dict, required_fields: List[str]) -> None:
        """Raise ValidationError listing missing fields."""
        if data is None:
            raise ValidationError("Request body must be JSON")
        missing = [field for field in required_fields if data.get(field) in (None, '')]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    @staticmethod
    def parse_date(value: str, field: str = 'date') -> date:
        try:
            return date.fromisoformat(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {field} format, expected YYYY-MM-DD")

    @staticmethod
    def parse_time(value: str, field: str = 'time') -> time:
        try:
            return time.fromisoformat(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {field} format, expected HH:MM")

    @staticmethod
    def parse_rating(value, field: str = 'rating') -> int:
        """Ratings, priorities and levels share the 1..5 scale."""
        if value is None:
            return None
        if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 5:
            raise ValidationError(f"{field.title()} must be an integer between 1 and 5")
        return value
