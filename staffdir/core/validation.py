"""
Input validation for new employee records.
Applied by every store before anything is persisted.
"""

import re
from typing import Optional

from .errors import ValidationError
from .schema import EmployeeDraft

DATA_URI_PATTERN = re.compile(r"^data:image/[A-Za-z0-9.+-]+;base64,[A-Za-z0-9+/=\s]+$")


def normalize_photo_url(photo_url: Optional[str]) -> Optional[str]:
    """Return a usable photo reference, or None when absent or blank."""
    if photo_url is None:
        return None
    if not isinstance(photo_url, str):
        raise ValidationError("photo_url must be text")
    photo_url = photo_url.strip()
    if not photo_url:
        return None
    if photo_url.startswith("data:") and not DATA_URI_PATTERN.match(photo_url):
        raise ValidationError("photo_url data URI must be a base64-encoded image")
    return photo_url


def validate_new_employee(name: str, designation: str, department: str,
                          photo_url: Optional[str] = None) -> EmployeeDraft:
    """Trim and check the caller-supplied fields of a new employee."""
    fields = {"name": name, "designation": designation, "department": department}

    missing = [field for field, value in fields.items() if not isinstance(value, str) or not value.strip()]
    if missing:
        raise ValidationError(f"Please enter {', '.join(missing)}")

    return EmployeeDraft(
        name=name.strip(),
        designation=designation.strip(),
        department=department.strip(),
        photo_url=normalize_photo_url(photo_url),
    )
