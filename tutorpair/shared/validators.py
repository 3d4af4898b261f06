"""Shared validation utilities"""

import re
from typing import Optional

from ..config import ALLOWED_EMAIL_DOMAIN


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid or outside the allowed domain
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    if ALLOWED_EMAIL_DOMAIN and not email.endswith(f"@{ALLOWED_EMAIL_DOMAIN.lower()}"):
        raise ValueError(f"Email must end with @{ALLOWED_EMAIL_DOMAIN}")

    return email


def validate_subject_code(code: str) -> str:
    """
    Normalise a subject code like "maths" or "Further-Maths" to MATHS / FURTHER_MATHS.

    Raises:
        ValueError: If the code contains anything besides letters, digits, dashes or underscores
    """
    code = code.strip().upper().replace("-", "_")
    if not re.match(r"^[A-Z0-9_]+$", code):
        raise ValueError("Subject code may only contain letters, digits and underscores")
    return code
