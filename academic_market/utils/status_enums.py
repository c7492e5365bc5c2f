# academic_market/utils/status_enums.py

from enum import Enum


class CandidateStatus(str, Enum):
    """Enumeration of candidate statuses."""

    JOB_SEEKING = "job_seeking"
    POSTDOC = "postdoc"
    ALT_CAREER = "alt_career"
    FACULTY = "faculty"


class CareerOutcome(str, Enum):
    """Terminal labels written to the outcome log."""

    FACULTY = "faculty"
    ALT_CAREER = "alt_career"


class FacultyRank(str, Enum):
    """Enumeration of faculty ranks."""

    ASSISTANT = "assistant"
    ASSOCIATE = "associate"
    FULL = "full"


class TenureStatus(str, Enum):
    TENURE_TRACK = "tenure_track"
    TENURED = "tenured"


class FacultyStatus(str, Enum):
    """Enumeration of yearly faculty attrition statuses."""

    STAYING = "staying"
    RETIRING = "retiring"
    MOVING = "moving"


class AgentKind(str, Enum):
    """Kinds of agents the factories know how to build."""

    CANDIDATE = "candidate"
    FACULTY = "faculty"
    DEPARTMENT = "department"


class Period(str, Enum):
    """Economic period a year or cohort falls in."""

    PRE_RECESSION = "Pre-recession"
    RECESSION = "Recession"
    POST_RECESSION = "Post-recession"


TERMINAL_STATUSES = (CandidateStatus.FACULTY.value, CandidateStatus.ALT_CAREER.value)

# Explicit exports
__all__ = [
    "CandidateStatus",
    "CareerOutcome",
    "FacultyRank",
    "TenureStatus",
    "FacultyStatus",
    "AgentKind",
    "Period",
    "TERMINAL_STATUSES",
]
