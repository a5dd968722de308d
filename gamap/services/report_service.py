"""
Report service: feeds record-store snapshots through the outcome engine.

Every call takes an explicit Viewer; nothing is read from ambient session
state. Results are recomputed from the store on each call.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from ..core.entities import Assessment, Course, Faculty, Student, StudentAssessment
from ..core.enums import MappingKind, Role
from ..core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from ..engine import (
    aggregate_performance, build_student_ga_reports, check_assessment_references,
    count_by, coverage_by_code, outcome_achievement, review_assessment, selector_for,
    student_recommendations
)
from ..engine.outcomes import DEFAULT_WEIGHT_TOLERANCE, Recommendation, StudentGAReport
from ..persistence.store import RecordStore

logger = logging.getLogger(__name__)

EXPORT_SECTIONS = ("student", "course", "assessment", "ga", "co", "po")


@dataclass(frozen=True)
class Viewer:
    """The user a report is generated for."""
    user_id: str
    role: Role
    faculty_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.role, Role):
            try:
                object.__setattr__(self, 'role', Role(str(self.role).lower()))
            except ValueError:
                raise AuthorizationError(f"Unknown role: {self.role}", error_code="unknown_role")
        if self.role is Role.FACULTY and not self.faculty_id:
            raise AuthorizationError("Faculty viewers must carry a faculty id", error_code="missing_faculty_id")

    @classmethod
    def admin(cls, user_id: str = "admin") -> "Viewer":
        return cls(user_id=user_id, role=Role.ADMIN)


@dataclass
class ReportScope:
    """Snapshot of the records visible to one report call."""
    students: List[Student] = field(default_factory=list)
    courses: List[Course] = field(default_factory=list)
    assessments: List[Assessment] = field(default_factory=list)
    student_assessments: List[StudentAssessment] = field(default_factory=list)
    faculty: List[Faculty] = field(default_factory=list)


class ReportService:
    """Builds summaries, coverage, GA reports and CSV exports."""

    def __init__(self, store: RecordStore, weight_tolerance: float = DEFAULT_WEIGHT_TOLERANCE):
        self._store = store
        self._weight_tolerance = weight_tolerance

    def scope(self, viewer: Viewer, batch: Optional[str] = None, section: Optional[str] = None) -> ReportScope:
        """Records visible to ``viewer``, optionally narrowed to a cohort."""
        students = self._store.students.find_all()
        courses = self._store.courses.find_all()
        assessments = self._store.assessments.find_all()
        evaluations = self._store.student_assessments.find_all()
        faculty = self._store.faculty.find_all()

        if viewer.role is Role.FACULTY:
            courses = [c for c in courses if c.faculty_id == viewer.faculty_id]
            faculty = [f for f in faculty if f.id == viewer.faculty_id]
            course_ids = {c.id for c in courses}
            assessments = [a for a in assessments if a.course_id in course_ids]
            assessment_ids = {a.id for a in assessments}
            evaluations = [e for e in evaluations if e.assessment_id in assessment_ids]
            taught_batches = {b for f in faculty for b in f.batches}
            evaluated_ids = {e.student_id for e in evaluations}
            students = [s for s in students if s.id in evaluated_ids or s.batch in taught_batches]

        if batch is not None:
            students = [s for s in students if s.batch == batch]
            courses = [c for c in courses if c.batch is None or c.batch == batch]
            course_ids = {c.id for c in courses}
            assessments = [a for a in assessments if a.course_id in course_ids]
        if section is not None:
            students = [s for s in students if s.section == section]
        if batch is not None or section is not None:
            student_ids = {s.id for s in students}
            evaluations = [e for e in evaluations if e.student_id in student_ids]

        return ReportScope(students, courses, assessments, evaluations, faculty)

    def data_summary(self, viewer: Viewer, batch: Optional[str] = None,
                     section: Optional[str] = None) -> Dict[str, Any]:
        scope = self.scope(viewer, batch, section)
        performance = aggregate_performance(scope.student_assessments)

        warnings = []
        for assessment in scope.assessments:
            warnings.extend(review_assessment(assessment, tolerance=self._weight_tolerance))
        warnings.extend(check_assessment_references(scope.student_assessments, self._store.assessments.find_all()))
        if warnings:
            logger.debug("Summary for %s carries %d integrity warnings", viewer.user_id, len(warnings))

        return {
            'totals': {
                'students': len(scope.students),
                'courses': len(scope.courses),
                'assessments': len(scope.assessments),
                'student_assessments': len(scope.student_assessments),
                'faculty': len(scope.faculty),
            },
            'batch_distribution': dict(count_by(scope.students, 'batch')),
            'department_distribution': dict(count_by(scope.students, 'department')),
            'assessment_type_distribution': dict(
                count_by(scope.assessments, lambda a: a.assessment_type.value)),
            'performance': dict(performance.to_dict(), display_average=performance.display_average),
            'coverage': {
                kind.value: dict(coverage_by_code(scope.assessments, selector_for(kind)))
                for kind in MappingKind
            },
            'warnings': [warning.to_dict() for warning in warnings],
        }

    def coverage(self, viewer: Viewer, kind: Union[str, MappingKind]) -> Mapping[str, int]:
        return coverage_by_code(self.scope(viewer).assessments, selector_for(kind))

    def student_reports(self, viewer: Viewer, batch: Optional[str] = None,
                        section: Optional[str] = None) -> List[StudentGAReport]:
        scope = self.scope(viewer, batch, section)
        return build_student_ga_reports(scope.students, scope.assessments, scope.courses,
                                        scope.student_assessments)

    def visible_student(self, viewer: Viewer, student_id: str) -> Student:
        """The student, if ``viewer`` may see them.

        Raises ResourceNotFoundError for an unknown id and AuthorizationError
        for a student outside the viewer's scope.
        """
        student = self._store.students.find_by_id(student_id)
        if student is None:
            raise ResourceNotFoundError(f"Student {student_id} not found", error_code="student_not_found")
        if viewer.role is Role.FACULTY and student_id not in {s.id for s in self.scope(viewer).students}:
            raise AuthorizationError(f"Student {student_id} is outside this faculty member's cohorts",
                                     error_code="student_out_of_scope")
        return student

    def recommendations(self, viewer: Viewer, student_id: str) -> List[Recommendation]:
        student = self.visible_student(viewer, student_id)
        scope = self.scope(viewer)
        return student_recommendations(student, scope.assessments, scope.student_assessments)

    def export_csv(self, viewer: Viewer, section: str, batch: Optional[str] = None) -> str:
        """Render one report section as CSV text."""
        if section not in EXPORT_SECTIONS:
            raise ValidationError(f"Unknown export section: {section}", error_code="invalid_section",
                                  details={'allowed': list(EXPORT_SECTIONS)})
        scope = self.scope(viewer, batch)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        if section == "student":
            students_by_id = {s.id: s for s in scope.students}
            writer.writerow(["Roll Number", "Student Name", "School", "Department", "Batch",
                             "Overall GA Performance"])
            for report in build_student_ga_reports(scope.students, scope.assessments, scope.courses,
                                                   scope.student_assessments):
                student = students_by_id[report.student_id]
                writer.writerow([report.roll_number, report.student_name, student.school or "",
                                 student.department, student.batch, f"{report.overall:.2f}"])
        elif section == "course":
            faculty_names = {f.id: f.name for f in self._store.faculty.find_all()}
            writer.writerow(["Course Code", "Course Name", "School", "Department", "Faculty", "Assessments"])
            for course in scope.courses:
                count = sum(1 for a in scope.assessments if a.course_id == course.id)
                writer.writerow([course.code, course.name, course.school or "", course.department,
                                 faculty_names.get(course.faculty_id, course.faculty_name or "N/A"), count])
        elif section == "assessment":
            course_names = {c.id: c.name for c in scope.courses}
            writer.writerow(["Assessment Name", "Course", "Type", "Max Marks", "Weightage"])
            for assessment in scope.assessments:
                writer.writerow([assessment.name, course_names.get(assessment.course_id, "N/A"),
                                 assessment.assessment_type.value, assessment.max_marks, assessment.weightage])
        else:
            kind = MappingKind(section.upper())
            names: Dict[str, str] = {}
            for assessment in scope.assessments:
                for entry in selector_for(kind)(assessment):
                    names.setdefault(entry.code, entry.ga_name if kind is MappingKind.GA else entry.name)
            writer.writerow([f"{kind.value} Code", f"{kind.value} Name", "Average Performance Score",
                             "Student Count", "Average Weightage"])
            for item in outcome_achievement(scope.student_assessments, scope.assessments, scope.courses,
                                            selector_for(kind)):
                writer.writerow([item.code, names.get(item.code, "N/A"), f"{item.value:.2f}",
                                 item.student_count, f"{item.average_weight:.2f}"])

        logger.info("Exported %s report for %s", section, viewer.user_id)
        return buffer.getvalue()
