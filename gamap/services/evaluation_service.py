"""
Evaluation service: record mutations that carry integrity rules.

Every write goes through the record store; GA scores are computed by the
outcome engine at evaluation time, and at most one evaluation is kept per
(student, assessment) pair.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..core.entities import Assessment, Course, Faculty, Student, StudentAssessment
from ..core.exceptions import DuplicateEntityError, IntegrityWarning, ResourceNotFoundError
from ..engine import compute_ga_scores, review_assessment, validate_marks
from ..engine.outcomes import DEFAULT_WEIGHT_TOLERANCE
from ..persistence.store import RecordStore

logger = logging.getLogger(__name__)


class EvaluationService:
    """Create, evaluate and delete records against a RecordStore."""

    def __init__(self, store: RecordStore, weight_tolerance: float = DEFAULT_WEIGHT_TOLERANCE):
        self._store = store
        self._weight_tolerance = weight_tolerance
        self._lock = threading.RLock()

    def save_student(self, student: Student) -> Student:
        self._store.students.save(student)
        logger.info("Saved student %s (%s)", student.roll_number, student.id)
        return student

    def save_course(self, course: Course) -> Course:
        self._store.courses.save(course)
        logger.info("Saved course %s (%s)", course.code, course.id)
        return course

    def save_assessment(self, assessment: Assessment) -> Tuple[Assessment, List[IntegrityWarning]]:
        """Store an assessment after checking it against its course catalog.

        Dangling CO/PO codes raise ValidationError. Weightage sums that miss 100
        are returned as warnings and do not block the save.
        """
        course = self._store.courses.find_by_id(assessment.course_id)
        if course is None:
            raise ResourceNotFoundError(f"Course {assessment.course_id} not found",
                                        error_code="course_not_found")
        warnings = review_assessment(assessment, course, self._weight_tolerance)
        for warning in warnings:
            logger.warning(warning.message)
        self._store.assessments.save(assessment)
        logger.info("Saved assessment %s for course %s", assessment.id, course.code)
        return assessment, warnings

    def register_faculty(self, faculty: Faculty) -> Faculty:
        """Store a faculty record; email addresses are unique across faculty."""
        with self._lock:
            existing = self._store.faculty.find_by_email(faculty.email)
            if existing is not None and existing.id != faculty.id:
                raise DuplicateEntityError(
                    f"Faculty with email {faculty.email} already exists",
                    error_code="duplicate_email",
                    details={'faculty_id': existing.id}
                )
            self._store.faculty.save(faculty)
        logger.info("Registered faculty %s", faculty.email)
        return faculty

    def record_evaluation(self, student_id: str, assessment_id: str, marks_obtained: float,
                          evaluated_by: Optional[str] = None, measured: bool = False) -> StudentAssessment:
        """Record a student's marks on an assessment.

        A later evaluation for the same pair replaces the earlier one and keeps
        its id.
        """
        with self._lock:
            student = self._store.students.find_by_id(student_id)
            if student is None:
                raise ResourceNotFoundError(f"Student {student_id} not found", error_code="student_not_found")
            assessment = self._store.assessments.find_by_id(assessment_id)
            if assessment is None:
                raise ResourceNotFoundError(f"Assessment {assessment_id} not found",
                                            error_code="assessment_not_found")

            evaluation = StudentAssessment(
                student_id=student.id,
                assessment_id=assessment.id,
                marks_obtained=marks_obtained,
                max_marks=assessment.max_marks,
                evaluated_by=evaluated_by,
            )
            validate_marks(assessment, evaluation)
            ga_scores = compute_ga_scores(assessment, evaluation, measured=measured)

            existing = self._store.student_assessments.find_by_pair(student.id, assessment.id)
            if existing is not None:
                evaluation = existing.replace(
                    marks_obtained=marks_obtained,
                    max_marks=assessment.max_marks,
                    ga_scores=ga_scores,
                    submitted_at=datetime.now(timezone.utc),
                    evaluated_by=evaluated_by,
                )
                logger.info("Replaced evaluation %s for student %s on assessment %s",
                            evaluation.id, student.roll_number, assessment.id)
            else:
                evaluation = StudentAssessment(
                    student_id=student.id,
                    assessment_id=assessment.id,
                    marks_obtained=marks_obtained,
                    max_marks=assessment.max_marks,
                    ga_scores=ga_scores,
                    evaluated_by=evaluated_by,
                    entity_id=evaluation.id,
                )
                logger.info("Recorded evaluation %s for student %s on assessment %s",
                            evaluation.id, student.roll_number, assessment.id)

            self._store.student_assessments.save(evaluation)
            return evaluation

    def delete_student(self, student_id: str) -> int:
        """Delete a student and their evaluations. Returns evaluations removed."""
        with self._lock:
            if not self._store.students.delete(student_id):
                raise ResourceNotFoundError(f"Student {student_id} not found", error_code="student_not_found")
            removed = self._delete_evaluations(self._store.student_assessments.find_by_student(student_id))
        logger.info("Deleted student %s and %d evaluations", student_id, removed)
        return removed

    def delete_assessment(self, assessment_id: str) -> int:
        """Delete an assessment and its evaluations. Returns evaluations removed."""
        with self._lock:
            if not self._store.assessments.delete(assessment_id):
                raise ResourceNotFoundError(f"Assessment {assessment_id} not found",
                                            error_code="assessment_not_found")
            removed = self._delete_evaluations(self._store.student_assessments.find_by_assessment(assessment_id))
        logger.info("Deleted assessment %s and %d evaluations", assessment_id, removed)
        return removed

    def _delete_evaluations(self, evaluations: List[StudentAssessment]) -> int:
        return sum(1 for evaluation in evaluations if self._store.student_assessments.delete(evaluation.id))
