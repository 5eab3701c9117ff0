"""
Central enums for field keys, grid states and notification kinds.
Keeps string constants shared by the editors, the table and the controller in one place.
"""

from enum import Enum


class UpdateKey(str, Enum):
    """Fields of a user record that can be edited inline."""
    EMAIL = "email"
    NAME = "name"
    DOB = "dob"
    LOCATION = "location"
    PHONE_NUMBER = "phone_number"
    GENDER = "gender"
    FAVOURITE = "favourite"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class GridState(str, Enum):
    """States of the batch submission flow."""
    IDLE = "IDLE"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    SUBMITTING = "SUBMITTING"


class NotificationKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# Convenience groups
EDITABLE_KEYS = tuple(key.value for key in UpdateKey)
REQUIRED_KEYS = EDITABLE_KEYS
GENDER_LABELS = {Gender.MALE.value: "Male", Gender.FEMALE.value: "Female"}
