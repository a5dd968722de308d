"""
Repository pattern implementations for data access.
"""

import json
import threading
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from ..core.entities import AbstractEntity, Assessment, Course, Faculty, Student, StudentAssessment
from ..core.exceptions import PersistenceError, ValidationError
from .database import DatabaseManager

T = TypeVar('T', bound=AbstractEntity)


class BaseRepository(ABC, Generic[T]):
    """Keyed collection of one record type. ``save`` inserts or replaces by id."""

    entity_class: Type[T]
    entity_type: str

    def __init__(self, database: DatabaseManager):
        self._database = database
        self._lock = threading.RLock()

    def save(self, entity: T) -> T:
        """Save an entity, replacing any stored record with the same id."""
        query = """
            INSERT INTO records (id, type, data, created_at, updated_at, version)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (type, id) DO UPDATE SET
                data = excluded.data,
                updated_at = excluded.updated_at,
                version = excluded.version
        """
        params = (
            entity.id,
            self.entity_type,
            json.dumps(entity.to_dict()),
            entity.created_at.isoformat(),
            entity.updated_at.isoformat(),
            entity.version,
        )
        with self._lock:
            self._database.execute_update(query, params)
        return entity

    def find_by_id(self, entity_id: str) -> Optional[T]:
        """Find entity by ID."""
        query = "SELECT data FROM records WHERE id = ? AND type = ?"
        with self._lock:
            results = self._database.execute_query(query, (entity_id, self.entity_type))
        if results:
            return self._entity_from_row(results[0])
        return None

    def find_all(self) -> List[T]:
        """All entities of this type in insertion order."""
        query = "SELECT data FROM records WHERE type = ? ORDER BY seq"
        with self._lock:
            results = self._database.execute_query(query, (self.entity_type,))
        return [self._entity_from_row(row) for row in results]

    def find_where(self, **criteria: Any) -> List[T]:
        """Entities whose attributes equal every keyword in ``criteria``."""
        return [
            entity for entity in self.find_all()
            if all(getattr(entity, key) == value for key, value in criteria.items())
        ]

    def delete(self, entity_id: str) -> bool:
        """Delete an entity by ID."""
        query = "DELETE FROM records WHERE id = ? AND type = ?"
        with self._lock:
            return self._database.execute_update(query, (entity_id, self.entity_type)) > 0

    def count(self) -> int:
        query = "SELECT COUNT(*) AS count FROM records WHERE type = ?"
        with self._lock:
            results = self._database.execute_query(query, (self.entity_type,))
        return results[0]["count"] if results else 0

    def _entity_from_row(self, row: Dict[str, Any]) -> T:
        try:
            return self._entity_from_dict(json.loads(row["data"]))
        except (ValueError, KeyError, ValidationError) as e:
            raise PersistenceError(f"Corrupt {self.entity_type} record: {str(e)}")

    def _entity_from_dict(self, data: Dict[str, Any]) -> T:
        """Convert dictionary to entity instance."""
        return self.entity_class.from_dict(data)


class StudentRepository(BaseRepository[Student]):
    """Repository for Student records."""

    entity_class = Student
    entity_type = "student"

    def find_by_roll_number(self, roll_number: str) -> Optional[Student]:
        matches = self.find_where(roll_number=roll_number)
        return matches[0] if matches else None

    def find_by_batch(self, batch: str, section: Optional[str] = None) -> List[Student]:
        students = self.find_where(batch=batch)
        if section is not None:
            students = [s for s in students if s.section == section]
        return students


class CourseRepository(BaseRepository[Course]):
    """Repository for Course records."""

    entity_class = Course
    entity_type = "course"

    def find_by_code(self, code: str) -> Optional[Course]:
        matches = self.find_where(code=code)
        return matches[0] if matches else None

    def find_by_faculty(self, faculty_id: str) -> List[Course]:
        return self.find_where(faculty_id=faculty_id)


class AssessmentRepository(BaseRepository[Assessment]):
    """Repository for Assessment records."""

    entity_class = Assessment
    entity_type = "assessment"

    def find_by_course(self, course_id: str) -> List[Assessment]:
        return self.find_where(course_id=course_id)


class StudentAssessmentRepository(BaseRepository[StudentAssessment]):
    """Repository for evaluated student assessments."""

    entity_class = StudentAssessment
    entity_type = "student_assessment"

    def find_by_student(self, student_id: str) -> List[StudentAssessment]:
        return self.find_where(student_id=student_id)

    def find_by_assessment(self, assessment_id: str) -> List[StudentAssessment]:
        return self.find_where(assessment_id=assessment_id)

    def find_by_pair(self, student_id: str, assessment_id: str) -> Optional[StudentAssessment]:
        matches = self.find_where(student_id=student_id, assessment_id=assessment_id)
        return matches[0] if matches else None


class FacultyRepository(BaseRepository[Faculty]):
    """Repository for Faculty records."""

    entity_class = Faculty
    entity_type = "faculty"

    def find_by_email(self, email: str) -> Optional[Faculty]:
        email = email.lower()
        for faculty in self.find_all():
            if faculty.email.lower() == email:
                return faculty
        return None
