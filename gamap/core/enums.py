"""
Enumerations and constants for the GA mapping platform.
"""

from enum import Enum


class AssessmentType(Enum):
    """Kinds of assessment a course can schedule."""
    QUIZ = "Quiz"
    ASSIGNMENT = "Assignment"
    MID_TERM = "Mid-Term"
    END_TERM = "End-Term"
    PROJECT = "Project"
    LAB = "Lab"
    PRESENTATION = "Presentation"


class ProficiencyLevel(Enum):
    """Graduate attribute proficiency levels."""
    INTRODUCTORY = "Introductory"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class MappingKind(Enum):
    """Outcome mapping lists carried by an assessment."""
    GA = "GA"
    CO = "CO"
    PO = "PO"


class PerformanceBucket(Enum):
    """Histogram buckets, in evaluation order."""
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    POOR = "poor"


class Role(Enum):
    """Roles a report viewer can hold."""
    ADMIN = "admin"
    FACULTY = "faculty"


class RecommendationType(Enum):
    """Kinds of per-attribute advice, in priority order."""
    IMPROVEMENT = "improvement"
    FOCUS = "focus"
    STRENGTH = "strength"


# Lower bounds (inclusive) for each bucket; anything below the last bound is POOR.
BUCKET_THRESHOLDS = (
    (PerformanceBucket.EXCELLENT, 90.0),
    (PerformanceBucket.GOOD, 80.0),
    (PerformanceBucket.AVERAGE, 70.0),
    (PerformanceBucket.BELOW_AVERAGE, 60.0),
)

ADVANCED_THRESHOLD = 80.0
INTERMEDIATE_THRESHOLD = 60.0
