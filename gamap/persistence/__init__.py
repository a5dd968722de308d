"""
Persistence module: the record store backing every collection.
"""

from .database import DatabaseManager, SQLiteDatabase, DatabaseFactory
from .store import RecordStore
from .repositories import (
    BaseRepository, StudentRepository, CourseRepository, AssessmentRepository,
    StudentAssessmentRepository, FacultyRepository
)

__all__ = [
    "DatabaseManager",
    "SQLiteDatabase",
    "DatabaseFactory",
    "BaseRepository",
    "StudentRepository",
    "CourseRepository",
    "AssessmentRepository",
    "StudentAssessmentRepository",
    "FacultyRepository",
    "RecordStore",
]
