import pytest

from gamap.core.entities import (
    Assessment, Course, Faculty, GAMapping, OutcomeMapping, OutcomeRef, Student, StudentAssessment
)
from gamap.core.enums import AssessmentType, ProficiencyLevel
from gamap.persistence import RecordStore, SQLiteDatabase
from gamap.services import EvaluationService, ReportService


@pytest.fixture
def course():
    return Course(
        code="CSE201",
        name="Data Structures",
        department="Computer Science & Engineering",
        semester=3,
        credits=4,
        faculty_id="faculty-1",
        faculty_name="Dr. Meera Iyer",
        batch="2023-27",
        co_catalog=[OutcomeRef("CO1", "Analyse"), OutcomeRef("CO2", "Implement"), OutcomeRef("CO3", "Design")],
        po_catalog=[OutcomeRef("PO1", "Knowledge"), OutcomeRef("PO2", "Analysis")],
    )


@pytest.fixture
def assessment(course):
    return Assessment(
        course_id=course.id,
        name="Mid-Term",
        assessment_type=AssessmentType.MID_TERM,
        max_marks=50,
        weightage=30,
        ga_mapping=[GAMapping("GA1", "Engineering Knowledge", 40, ProficiencyLevel.INTERMEDIATE)],
        co_mapping=[OutcomeMapping("CO1", "Analyse", 60), OutcomeMapping("CO2", "Implement", 40)],
        po_mapping=[OutcomeMapping("PO1", "Knowledge", 100)],
    )


@pytest.fixture
def student():
    return Student(
        roll_number="A2305001",
        name="Aarav Shah",
        email="aarav@example.edu",
        department="Computer Science & Engineering",
        batch="2023-27",
        semester=3,
        section="A",
    )


@pytest.fixture
def faculty():
    return Faculty(
        name="Dr. Meera Iyer",
        email="meera.iyer@example.edu",
        school="ASET",
        department="Computer Science & Engineering",
        batches=["2023-27"],
        sections=["A"],
        subjects=["CSE201"],
        entity_id="faculty-1",
    )


@pytest.fixture
def make_record():
    def _make(marks, max_marks=100, assessment_id="assessment-1", student_id="student-1"):
        return StudentAssessment(
            student_id=student_id,
            assessment_id=assessment_id,
            marks_obtained=marks,
            max_marks=max_marks,
        )
    return _make


@pytest.fixture
def store(tmp_path):
    return RecordStore(SQLiteDatabase(str(tmp_path / "gamap_test.db")))


@pytest.fixture
def evaluation_service(store):
    return EvaluationService(store)


@pytest.fixture
def report_service(store):
    return ReportService(store)
