"""
Canonical enums for taskboard entities.

The enum values are what gets written to the spreadsheet cells, so they
must stay stable once data exists remotely.
"""

from enum import Enum


class Role(str, Enum):
    """What a person may do on the board."""

    LEAD = "lead"
    ASSIGNEE = "assignee"


class WorkCategory(str, Enum):
    """Closed set of work item categories."""

    ANNOUNCEMENT = "Announcement"
    FEATURE_RELEASE = "Feature Release"
    BUG = "Bug"
    QUESTION_OF_THE_WEEK = "Question of the Week"
    OTHER = "Other"


class InputKind(str, Enum):
    """Kinds of input an assignee provides when completing a work item."""

    ACKNOWLEDGE = "Acknowledge"
    FREE_TEXT = "FreeText"
    SINGLE_CHOICE = "SingleChoice"


class AssignmentMode(str, Enum):
    """Whether a work item targets accounts or people."""

    BY_ACCOUNT = "account"
    BY_PERSON = "person"
