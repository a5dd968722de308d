import pytest

from gamap.core import (
    Assessment, AssessmentType, Course, Faculty, GAMapping, GAScore, OutcomeRef, ProficiencyLevel,
    Student, StudentAssessment, ValidationError, departments_for_school, school_for_department,
    schools_with_records
)


class TestStudent:

    def test_school_is_derived_from_department(self, student):
        assert student.school == "ASET"

    def test_explicit_school_wins(self):
        student = Student("R1", "Ira", "ira@example.edu", "Computer Science & Engineering",
                          "2023-27", 1, school="AIIT")
        assert student.school == "AIIT"

    def test_unknown_department_has_no_school(self):
        student = Student("R1", "Ira", "ira@example.edu", "Astrophysics", "2023-27", 1)
        assert student.school is None

    def test_semester_must_be_positive(self):
        with pytest.raises(ValidationError):
            Student("R1", "Ira", "ira@example.edu", "Data Science", "2023-27", 0)

    def test_round_trip(self, student):
        assert Student.from_dict(student.to_dict()) == student


class TestReplace:

    def test_replace_returns_new_version_with_same_id(self, student):
        updated = student.replace(section="B")

        assert updated.id == student.id
        assert updated.version == student.version + 1
        assert updated.section == "B"
        assert updated.created_at == student.created_at
        assert updated.updated_at >= student.updated_at
        assert student.section == "A"

    def test_replace_rejects_unknown_fields(self, student):
        with pytest.raises(ValidationError):
            student.replace(grade="A+")

    def test_properties_are_read_only(self, student):
        with pytest.raises(AttributeError):
            student.name = "Someone Else"


class TestCourse:

    def test_duplicate_catalog_codes_are_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            Course("CSE101", "Programming", "Computer Science & Engineering", 1, 4, "f1", "Dr. X",
                   co_catalog=[OutcomeRef("CO1", "a"), OutcomeRef("CO1", "b")])
        assert excinfo.value.details["codes"] == ["CO1"]

    def test_negative_credits_are_rejected(self):
        with pytest.raises(ValidationError):
            Course("CSE101", "Programming", "Computer Science & Engineering", 1, -1, "f1", "Dr. X")

    def test_catalog_codes_keep_order(self, course):
        assert course.co_codes() == ["CO1", "CO2", "CO3"]
        assert course.po_codes() == ["PO1", "PO2"]

    def test_round_trip(self, course):
        restored = Course.from_dict(course.to_dict())

        assert restored == course
        assert restored.co_catalog == course.co_catalog


class TestAssessment:

    def test_type_is_coerced_from_value(self, course):
        assessment = Assessment(course.id, "Viva", "Presentation", 20, 5)
        assert assessment.assessment_type is AssessmentType.PRESENTATION

    def test_unknown_type_is_rejected(self, course):
        with pytest.raises(ValidationError):
            Assessment(course.id, "Viva", "Oral", 20, 5)

    def test_mapping_level_is_coerced(self):
        assert GAMapping("GA1", "Knowledge", 50, "Advanced").target_level is ProficiencyLevel.ADVANCED

    def test_unknown_level_is_rejected(self):
        with pytest.raises(ValidationError):
            GAMapping("GA1", "Knowledge", 50, "Expert")

    def test_find_ga_mapping(self, assessment):
        assert assessment.find_ga_mapping("GA1").weightage == 40
        assert assessment.find_ga_mapping("GA5") is None

    def test_round_trip(self, assessment):
        restored = Assessment.from_dict(assessment.to_dict())

        assert restored == assessment
        assert restored.co_mapping == assessment.co_mapping


class TestStudentAssessment:

    def test_round_trip_with_scores(self, student, assessment):
        record = StudentAssessment(
            student.id, assessment.id, 40, 50,
            ga_scores=[GAScore("GA1", 32, ProficiencyLevel.INTERMEDIATE, 40)],
            evaluated_by="faculty-1",
        )

        restored = StudentAssessment.from_dict(record.to_dict())

        assert restored == record
        assert restored.ga_scores[0].level is ProficiencyLevel.INTERMEDIATE
        assert restored.submitted_at == record.created_at


class TestFaculty:

    def test_round_trip(self, faculty):
        restored = Faculty.from_dict(faculty.to_dict())

        assert restored == faculty
        assert restored.batches == ("2023-27",)


class TestSchools:

    def test_lookup(self):
        assert school_for_department("Computer Science & Applications") == "AIIT"
        assert "Data Science" in departments_for_school("ASET")
        assert departments_for_school("Nowhere") == []

    def test_schools_with_records_keeps_first_seen_order(self, student, course):
        other = Student("R2", "Ira", "ira@example.edu", "Bachelor of Arts (BA)", "2023-27", 1)

        assert schools_with_records([other, student, course]) == ["ASLA", "ASET"]
