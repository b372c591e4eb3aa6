"""Validation utilities for the application."""
import re
from typing import Any

class ValidationError(Exception):
    """Raised when a request body is malformed."""
    pass

class Validator:
    """Validation helper class."""

    MAX_ENROLLMENT_LENGTH = 30
    MAX_ENTRY_CODE_LENGTH = 10

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @classmethod
    def validate_enrollment(cls, enrollment: str) -> str:
        """Trimmed enrollment number, or ValidationError."""
        if not isinstance(enrollment, str) or not enrollment.strip():
            raise ValidationError("Enrollment is required")
        enrollment = enrollment.strip()
        if len(enrollment) > cls.MAX_ENROLLMENT_LENGTH:
            raise ValidationError("Enrollment is too long")
        return enrollment

    @classmethod
    def validate_entry_code(cls, code: str) -> str:
        """Trimmed entry code, or ValidationError."""
        if not isinstance(code, str) or not code.strip():
            raise ValidationError("Entry code is required")
        code = code.strip()
        if len(code) > cls.MAX_ENTRY_CODE_LENGTH:
            raise ValidationError("Invalid entry code")
        return code

    @staticmethod
    def validate_coordinates(latitude: Any, longitude: Any) -> tuple:
        """Float (lat, lng) within valid ranges, or ValidationError."""
        try:
            lat = float(latitude)
            lng = float(longitude)
        except (TypeError, ValueError):
            raise ValidationError("Latitude and longitude must be numbers")

        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValidationError("Coordinates out of range")
        return lat, lng
