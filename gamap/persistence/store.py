"""
Record store: one repository per collection over a shared database.
"""

from typing import Dict

from .database import DatabaseManager
from .repositories import (
    AssessmentRepository, BaseRepository, CourseRepository, FacultyRepository,
    StudentAssessmentRepository, StudentRepository
)


class RecordStore:
    """Holds the repositories for every record collection."""

    def __init__(self, database: DatabaseManager):
        self._database = database
        self.students = StudentRepository(database)
        self.courses = CourseRepository(database)
        self.assessments = AssessmentRepository(database)
        self.student_assessments = StudentAssessmentRepository(database)
        self.faculty = FacultyRepository(database)

    @property
    def database(self) -> DatabaseManager:
        return self._database

    def repositories(self) -> Dict[str, BaseRepository]:
        return {
            'student': self.students,
            'course': self.courses,
            'assessment': self.assessments,
            'student_assessment': self.student_assessments,
            'faculty': self.faculty,
        }

    def counts(self) -> Dict[str, int]:
        return {name: repo.count() for name, repo in self.repositories().items()}
