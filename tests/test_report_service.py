import pytest

from gamap.core.entities import Assessment, Course, GAMapping, OutcomeRef, Student, StudentAssessment
from gamap.core.enums import RecommendationType, Role
from gamap.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from gamap.services import EXPORT_SECTIONS, Viewer


@pytest.fixture
def cohort(evaluation_service, course, assessment, student, faculty):
    """Two courses taught by different faculty, one evaluated student in each."""
    evaluation_service.register_faculty(faculty)
    evaluation_service.save_course(course)
    evaluation_service.save_assessment(assessment)
    evaluation_service.save_student(student)
    evaluation_service.record_evaluation(student.id, assessment.id, 40, faculty.id)

    other_course = evaluation_service.save_course(Course(
        "MBA101", "Marketing", "Bachelor of Business Administration (BBA)", 1, 3,
        "faculty-2", "Dr. Anil Rao", batch="2024-27",
        co_catalog=[OutcomeRef("CO1", "Segment markets")],
    ))
    other_assessment, _ = evaluation_service.save_assessment(Assessment(
        other_course.id, "Case Study", "Assignment", 20, 15,
        ga_mapping=[GAMapping("GA4", "Communication", 100)],
    ))
    other_student = evaluation_service.save_student(Student(
        "B2401001", "Sara Khan", "sara@example.edu", "Bachelor of Business Administration (BBA)",
        "2024-27", 1, "B",
    ))
    evaluation_service.record_evaluation(other_student.id, other_assessment.id, 19)
    return other_student


@pytest.fixture
def faculty_viewer():
    return Viewer("meera", Role.FACULTY, faculty_id="faculty-1")


class TestViewer:

    def test_role_is_coerced(self):
        assert Viewer("u1", "Faculty", "faculty-1").role is Role.FACULTY

    def test_unknown_role_is_rejected(self):
        with pytest.raises(AuthorizationError):
            Viewer("u1", "student")

    def test_faculty_viewer_needs_faculty_id(self):
        with pytest.raises(AuthorizationError):
            Viewer("u1", Role.FACULTY)


class TestScope:

    def test_admin_sees_everything(self, report_service, cohort):
        scope = report_service.scope(Viewer.admin())

        assert len(scope.students) == 2
        assert len(scope.courses) == 2
        assert len(scope.student_assessments) == 2

    def test_faculty_sees_only_own_courses(self, report_service, cohort, faculty_viewer, course, student):
        scope = report_service.scope(faculty_viewer)

        assert [c.id for c in scope.courses] == [course.id]
        assert [s.id for s in scope.students] == [student.id]
        assert len(scope.student_assessments) == 1
        assert [f.id for f in scope.faculty] == ["faculty-1"]

    def test_batch_filter(self, report_service, cohort):
        scope = report_service.scope(Viewer.admin(), batch="2024-27")

        assert [s.id for s in scope.students] == [cohort.id]
        assert [c.code for c in scope.courses] == ["MBA101"]
        assert len(scope.student_assessments) == 1

    def test_section_filter(self, report_service, cohort, student):
        scope = report_service.scope(Viewer.admin(), section="A")

        assert [s.id for s in scope.students] == [student.id]
        assert all(e.student_id == student.id for e in scope.student_assessments)


class TestDataSummary:

    def test_empty_store_is_zero_state(self, report_service):
        summary = report_service.data_summary(Viewer.admin())

        assert summary["totals"] == {
            'students': 0, 'courses': 0, 'assessments': 0, 'student_assessments': 0, 'faculty': 0
        }
        assert summary["performance"]["average"] == 0
        assert summary["performance"]["display_average"] == "0.0"
        assert set(summary["performance"]["histogram"].values()) == {0}
        assert summary["coverage"] == {"GA": {}, "CO": {}, "PO": {}}
        assert summary["warnings"] == []

    def test_admin_summary(self, report_service, cohort):
        summary = report_service.data_summary(Viewer.admin())

        assert summary["totals"]["students"] == 2
        assert summary["batch_distribution"] == {"2023-27": 1, "2024-27": 1}
        assert summary["assessment_type_distribution"] == {"Mid-Term": 1, "Assignment": 1}
        assert summary["performance"]["histogram"]["good"] == 1
        assert summary["performance"]["histogram"]["excellent"] == 1
        assert summary["performance"]["display_average"] == "87.5"
        assert summary["coverage"]["GA"] == {"GA1": 1, "GA4": 1}
        assert summary["coverage"]["PO"] == {"PO1": 1}

    def test_faculty_summary_is_scoped(self, report_service, cohort, faculty_viewer):
        summary = report_service.data_summary(faculty_viewer)

        assert summary["totals"]["courses"] == 1
        assert summary["coverage"]["GA"] == {"GA1": 1}
        assert summary["performance"]["count"] == 1

    def test_weight_and_reference_warnings(self, report_service, store, cohort):
        store.student_assessments.save(StudentAssessment(cohort.id, "deleted-assessment", 5, 10))

        warnings = report_service.data_summary(Viewer.admin())["warnings"]

        assert {w["kind"] for w in warnings} == {"mapping_weights", "unknown_assessment"}


class TestReports:

    def test_coverage(self, report_service, cohort, faculty_viewer):
        assert dict(report_service.coverage(faculty_viewer, "co")) == {"CO1": 1, "CO2": 1}

    def test_student_reports(self, report_service, cohort, faculty_viewer, student):
        reports = report_service.student_reports(faculty_viewer)

        assert [r.student_id for r in reports] == [student.id]
        assert reports[0].overall == pytest.approx(32)

    def test_student_export(self, report_service, cohort, faculty_viewer):
        lines = report_service.export_csv(faculty_viewer, "student").splitlines()

        assert lines == [
            "Roll Number,Student Name,School,Department,Batch,Overall GA Performance",
            "A2305001,Aarav Shah,ASET,Computer Science & Engineering,2023-27,32.00",
        ]

    def test_course_export_uses_faculty_record_name(self, report_service, cohort):
        lines = report_service.export_csv(Viewer.admin(), "course").splitlines()

        assert lines[0] == "Course Code,Course Name,School,Department,Faculty,Assessments"
        assert lines[1] == "CSE201,Data Structures,ASET,Computer Science & Engineering,Dr. Meera Iyer,1"
        assert lines[2].endswith("Dr. Anil Rao,1")

    def test_assessment_export(self, report_service, cohort):
        lines = report_service.export_csv(Viewer.admin(), "assessment", batch="2023-27").splitlines()

        assert lines == [
            "Assessment Name,Course,Type,Max Marks,Weightage",
            "Mid-Term,Data Structures,Mid-Term,50,30",
        ]

    def test_ga_export(self, report_service, cohort, faculty_viewer):
        lines = report_service.export_csv(faculty_viewer, "ga").splitlines()

        assert lines == [
            "GA Code,GA Name,Average Performance Score,Student Count,Average Weightage",
            "GA1,Engineering Knowledge,32.00,1,40.00",
        ]

    def test_every_section_has_a_header(self, report_service):
        for section in EXPORT_SECTIONS:
            assert report_service.export_csv(Viewer.admin(), section).count("\n") == 1

    def test_unknown_section(self, report_service):
        with pytest.raises(ValidationError):
            report_service.export_csv(Viewer.admin(), "faculty")


class TestStudentAccess:

    def test_faculty_sees_own_student(self, report_service, cohort, faculty_viewer, student):
        assert report_service.visible_student(faculty_viewer, student.id) == student

    def test_faculty_cannot_see_other_cohorts(self, report_service, cohort, faculty_viewer):
        with pytest.raises(AuthorizationError):
            report_service.visible_student(faculty_viewer, cohort.id)
        assert report_service.visible_student(Viewer.admin(), cohort.id) == cohort

    def test_unknown_student(self, report_service, cohort):
        with pytest.raises(ResourceNotFoundError):
            report_service.visible_student(Viewer.admin(), "nobody")


class TestRecommendations:

    def test_weak_attribute_comes_first(self, report_service, cohort, faculty_viewer, student):
        recommendations = report_service.recommendations(faculty_viewer, student.id)

        assert len(recommendations) == 12
        first = recommendations[0]
        assert (first.kind, first.ga_code, first.current_score, first.target_score) == (
            RecommendationType.IMPROVEMENT, "GA1", 32, 70)
        assert all(r.kind is RecommendationType.FOCUS for r in recommendations[1:])

    def test_out_of_scope_student(self, report_service, cohort, faculty_viewer):
        with pytest.raises(AuthorizationError):
            report_service.recommendations(faculty_viewer, cohort.id)
