"""
Core module containing the record model, enums and error taxonomy.
"""

from .entities import *
from .exceptions import *
from .enums import *
from .schools import School, SCHOOLS, departments_for_school, school_for_department, schools_with_records
from .graduate_attributes import GraduateAttribute, ProficiencyBand, GRADUATE_ATTRIBUTES, graduate_attribute

__all__ = [
    # Entities
    "AbstractEntity",
    "Student",
    "Course",
    "Assessment",
    "StudentAssessment",
    "Faculty",
    "OutcomeRef",
    "GAMapping",
    "OutcomeMapping",
    "GAScore",

    # Enums
    "AssessmentType",
    "ProficiencyLevel",
    "MappingKind",
    "PerformanceBucket",
    "Role",
    "RecommendationType",

    # Exceptions
    "GAMapException",
    "ValidationError",
    "AuthorizationError",
    "ResourceNotFoundError",
    "DuplicateEntityError",
    "PersistenceError",
    "ConfigurationError",
    "IntegrityWarning",

    # Schools
    "School",
    "SCHOOLS",
    "school_for_department",
    "departments_for_school",
    "schools_with_records",

    # Graduate attributes
    "GraduateAttribute",
    "ProficiencyBand",
    "GRADUATE_ATTRIBUTES",
    "graduate_attribute",
]
