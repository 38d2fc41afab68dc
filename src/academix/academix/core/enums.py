from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Per-student mark stored on every attendance record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    OD = "OD"
    NOT_MARKED = "Not Marked"


class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class LeadStatus(str, Enum):
    """Admission enquiry pipeline."""

    NEW = "New"
    CONTACTED = "Contacted"
    CONVERTED = "Converted"


class AuthState(str, Enum):
    """Lifecycle of the signed-in session that gates data fetching."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATING = "AUTHENTICATING"
    AUTHENTICATED = "AUTHENTICATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
