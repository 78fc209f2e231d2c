"""Enumerations and user-facing message strings shared across domains"""

from enum import IntEnum


class Role(IntEnum):
    """Role hierarchy: lower value means more privileges"""

    ADMINISTRATOR = 0
    MANAGER = 1
    CAREGIVER = 2

    @property
    def label(self) -> str:
        return {
            Role.ADMINISTRATOR: "Administrator",
            Role.MANAGER: "Manager",
            Role.CAREGIVER: "Caregiver",
        }[self]


class AuthStatus(IntEnum):
    NOT_VERIFIED = -1
    INACTIVE = 0
    ACTIVE = 1
    ARCHIVED = 2
    SOFT_DELETED = 3

    @property
    def label(self) -> str:
        return {
            AuthStatus.NOT_VERIFIED: "Not Verified",
            AuthStatus.INACTIVE: "Inactive",
            AuthStatus.ACTIVE: "Active",
            AuthStatus.ARCHIVED: "Archived",
            AuthStatus.SOFT_DELETED: "Deleted",
        }[self]


class PatientStatus(IntEnum):
    ACTIVE = 0
    ARCHIVED = 1
    DELETED = 2


class VisitStatus(IntEnum):
    ACTIVE = 1
    ARCHIVED = 2
    SOFT_DELETED = 3


class AssignmentStatus(IntEnum):
    INACTIVE = 0
    ACTIVE = 1


class Progress(IntEnum):
    CANCELED = -1
    SCHEDULED = 0
    IN_PROGRESS = 1
    COMPLETED = 2
    PAID = 3

    @property
    def label(self) -> str:
        return {
            Progress.CANCELED: "Canceled",
            Progress.SCHEDULED: "Scheduled",
            Progress.IN_PROGRESS: "In Progress",
            Progress.COMPLETED: "Completed",
            Progress.PAID: "Paid",
        }[self]


class PersonType(IntEnum):
    SYSTEM = -1
    USER = 0
    PATIENT = 1


ADDRESS_TYPES = ("House", "Apartment", "Condominium", "Trailer", "Other")
DEFAULT_COUNTRY = "United States"
DEFAULT_USER_PHOTO = "/user/photo/default.jpg"
PLACEHOLDER_NAME = "TBD"


class Message:
    INVALID_CREDENTIALS = "Invalid credentials."
    TOKEN_REQUIRED = "Authorization header is required"
    TOKEN_FORMAT_INVALID = "Invalid token format"
    TOKEN_EXPIRED = "Token expired, please login again"
    TOKEN_INVALID = "Invalid token authorization"
    ACCOUNT_NOT_ACTIVATED = "Account is not activated."
    ACCOUNT_NOT_FOUND = "Account not found"
    UNAUTHORIZED_ROLE = "Unauthorized user role"
    UNAUTHORIZED_ACCESS = "Not authorized to access this data"
    USER_CREATED = "User created successfully."
    USER_UPDATED = "User updated successfully"
    USER_ACTIVATED = "User activated successfully"
    USER_INACTIVATED = "User inactivated successfully"
    USER_ARCHIVED = "User archived successfully"
    USER_DELETED = "User deleted successfully."
    USER_NOT_FOUND = "User not found"
    PASSWORD_CHANGED = "Password changed successfully"
    ROLE_CHANGED = "User role changed successfully"
    ROLE_INVALID = "Invalid role"
    EMAIL_INVALID = "Invalid email format"
    EMAIL_REGISTERED = "The email is already registered"
    EMAIL_NOT_FOUND = "Email not found"
    SSN_INVALID = "Invalid SSN format"
    PATIENT_NOT_FOUND = "Patient not found"
    PATIENT_ACTIVATED = "Patient activated successfully"
    PATIENT_ARCHIVED = "Patient archived successfully"
    PATIENT_DELETED = "Patient deleted successfully"
    ADDRESS_NOT_FOUND = "Address not found"
    VISIT_NOT_FOUND = "Visit not found"
    VISIT_TIME_INVALID = "End time cannot be before start time"
    VISIT_CONFLICT = "Visit was modified by another request, please retry"
    STATUS_INVALID = "Invalid status value"
    PERSON_TYPE_INVALID = "Invalid person type"
    CONTENT_TYPE_REQUIRED = "Content-Type header is required"
    CONTENT_TYPE_JSON = "Content-Type must be application/json"
    INTERNAL_ERROR = "Internal server error"
