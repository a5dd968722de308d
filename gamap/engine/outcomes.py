"""
Outcome mapping engine.

Pure functions over immutable record snapshots: GA scoring, cohort
performance aggregation, GA/CO/PO coverage and mapping-weight validation.
Nothing here keeps state, touches storage or logs; malformed input raises
ValidationError and advisory findings come back as IntegrityWarning values.
"""

import math
from dataclasses import dataclass, field
from fractions import Fraction
from operator import attrgetter
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.entities import Assessment, Course, GAMapping, GAScore, Student, StudentAssessment
from ..core.enums import (
    ADVANCED_THRESHOLD, BUCKET_THRESHOLDS, INTERMEDIATE_THRESHOLD,
    MappingKind, PerformanceBucket, ProficiencyLevel, RecommendationType
)
from ..core.graduate_attributes import GRADUATE_ATTRIBUTES, GraduateAttribute
from ..core.exceptions import IntegrityWarning, ValidationError

MappingSelector = Callable[[Assessment], Iterable[Any]]

GA_MAPPING: MappingSelector = attrgetter('ga_mapping')
CO_MAPPING: MappingSelector = attrgetter('co_mapping')
PO_MAPPING: MappingSelector = attrgetter('po_mapping')

SELECTORS: Dict[MappingKind, MappingSelector] = {
    MappingKind.GA: GA_MAPPING,
    MappingKind.CO: CO_MAPPING,
    MappingKind.PO: PO_MAPPING,
}

DEFAULT_WEIGHT_TOLERANCE = 1.0


def _as_kind(kind: Union[str, MappingKind]) -> MappingKind:
    if isinstance(kind, MappingKind):
        return kind
    try:
        return MappingKind(str(kind).upper())
    except ValueError:
        raise ValidationError(f"Unknown mapping kind: {kind}", error_code="invalid_mapping_kind")


def selector_for(kind: Union[str, MappingKind]) -> MappingSelector:
    """Accessor for the GA, CO or PO mapping list of an assessment."""
    return SELECTORS[_as_kind(kind)]


def _entries(assessment: Assessment, selector: MappingSelector) -> Iterable[Any]:
    return selector(assessment) or ()


def _tally(keys: Iterable[Any]) -> Mapping[Any, int]:
    counts: Dict[Any, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    return MappingProxyType(counts)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_level(score: float) -> ProficiencyLevel:
    """Measured proficiency: <60 Introductory, 60-79 Intermediate, >=80 Advanced."""
    if score >= ADVANCED_THRESHOLD:
        return ProficiencyLevel.ADVANCED
    if score >= INTERMEDIATE_THRESHOLD:
        return ProficiencyLevel.INTERMEDIATE
    return ProficiencyLevel.INTRODUCTORY


def classify_bucket(percent: float) -> PerformanceBucket:
    for bucket, lower_bound in BUCKET_THRESHOLDS:
        if percent >= lower_bound:
            return bucket
    return PerformanceBucket.POOR


def percentage(student_assessment: StudentAssessment) -> float:
    """Marks obtained as a percentage of the record's max marks. Not clamped or rounded."""
    max_marks = student_assessment.max_marks
    if max_marks is None or max_marks <= 0:
        raise ValidationError(
            f"Student assessment {student_assessment.id} has non-positive max marks",
            error_code="invalid_max_marks",
            details={'student_assessment_id': student_assessment.id, 'max_marks': max_marks}
        )
    return student_assessment.marks_obtained * 100 / max_marks


# ---------------------------------------------------------------------------
# GA scoring
# ---------------------------------------------------------------------------

def _exact(value: float) -> Fraction:
    # Decimal text, so 8.7 is 87/10 rather than the nearest binary float.
    return Fraction(str(value))


def validate_marks(assessment: Assessment, student_assessment: StudentAssessment) -> None:
    """Raise ValidationError unless the record belongs to ``assessment`` and its marks lie in ``[0, max_marks]``."""
    if student_assessment.assessment_id != assessment.id:
        raise ValidationError(
            "Student assessment does not belong to this assessment",
            error_code="assessment_mismatch",
            details={'assessment_id': assessment.id,
                     'student_assessment_id': student_assessment.id}
        )
    if assessment.max_marks is None or assessment.max_marks <= 0:
        raise ValidationError(
            f"Assessment {assessment.id} must have positive max marks",
            error_code="invalid_max_marks",
            details={'assessment_id': assessment.id, 'max_marks': assessment.max_marks}
        )
    marks = student_assessment.marks_obtained
    if marks is None or not 0 <= marks <= assessment.max_marks:
        raise ValidationError(
            f"Marks obtained must be between 0 and {assessment.max_marks}",
            error_code="marks_out_of_range",
            details={'assessment_id': assessment.id, 'marks_obtained': marks}
        )


def compute_ga_score(assessment: Assessment, student_assessment: StudentAssessment,
                     ga_mapping: GAMapping, measured: bool = False) -> GAScore:
    """Score a student's marks against one GA mapping of ``assessment``.

    The score is ``floor(marks_obtained / max_marks * weightage)``, so it lies
    in ``[0, weightage]``. The level is the mapping's target level unless
    ``measured`` is set, in which case it is classified from the score.
    """
    validate_marks(assessment, student_assessment)
    if ga_mapping not in assessment.ga_mapping:
        raise ValidationError(
            f"GA mapping {ga_mapping.ga_code} is not declared on assessment {assessment.id}",
            error_code="mapping_not_found",
            details={'assessment_id': assessment.id, 'ga_code': ga_mapping.ga_code}
        )
    if ga_mapping.weightage < 0:
        raise ValidationError(
            f"GA mapping {ga_mapping.ga_code} has negative weightage",
            error_code="invalid_weightage",
            details={'assessment_id': assessment.id, 'ga_code': ga_mapping.ga_code}
        )

    ratio = _exact(student_assessment.marks_obtained) / _exact(assessment.max_marks)
    score = math.floor(ratio * _exact(ga_mapping.weightage))
    level = classify_level(score) if measured else ga_mapping.target_level
    return GAScore(ga_code=ga_mapping.ga_code, score=score, level=level, weightage=ga_mapping.weightage)


def compute_ga_scores(assessment: Assessment, student_assessment: StudentAssessment,
                      measured: bool = False) -> List[GAScore]:
    """GA scores for every mapping on the assessment, in mapping order.

    Marks are checked even when the assessment maps no GA.
    """
    validate_marks(assessment, student_assessment)
    return [compute_ga_score(assessment, student_assessment, mapping, measured)
            for mapping in assessment.ga_mapping]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PerformanceSummary:
    average: float
    histogram: Mapping[str, int]
    count: int = 0

    @property
    def display_average(self) -> str:
        return f"{self.average:.1f}"

    def to_dict(self) -> Dict[str, Any]:
        return {'average': self.average, 'histogram': dict(self.histogram), 'count': self.count}


def aggregate_performance(student_assessments: Sequence[StudentAssessment]) -> PerformanceSummary:
    """Mean percentage and bucket histogram over evaluation records.

    Records are the unit of aggregation. An empty input is the zero state:
    average 0 and every bucket 0.
    """
    histogram = {bucket.value: 0 for bucket in PerformanceBucket}
    percents = [percentage(record) for record in student_assessments]
    for percent in percents:
        histogram[classify_bucket(percent).value] += 1
    average = sum(percents) / len(percents) if percents else 0
    return PerformanceSummary(average=average, histogram=MappingProxyType(histogram), count=len(percents))


def coverage_by_code(assessments: Iterable[Assessment], selector: MappingSelector) -> Mapping[str, int]:
    """Number of mapping entries per code across ``assessments``.

    ``selector`` picks the GA, CO or PO list from an assessment. Counts
    references, not weights; keys keep first-appearance order.
    """
    return _tally(entry.code for assessment in assessments for entry in _entries(assessment, selector))


def average_weight_by_code(assessments: Iterable[Assessment], selector: MappingSelector) -> Mapping[str, float]:
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for assessment in assessments:
        for entry in _entries(assessment, selector):
            totals[entry.code] = totals.get(entry.code, 0) + entry.weightage
            counts[entry.code] = counts.get(entry.code, 0) + 1
    return MappingProxyType({code: totals[code] / counts[code] for code in totals})


def count_by(records: Iterable[Any], key: Union[str, Callable[[Any], Any]]) -> Mapping[Any, int]:
    """Ordered tally of ``records`` by attribute name or key function."""
    key_func = attrgetter(key) if isinstance(key, str) else key
    return _tally(key_func(record) for record in records)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_mapping_weights(mapping_list: Sequence[Any], assessment_id: Optional[str] = None,
                             kind: Union[str, MappingKind] = MappingKind.GA,
                             tolerance: float = DEFAULT_WEIGHT_TOLERANCE) -> List[IntegrityWarning]:
    """Warn when a mapping list's weightages do not sum to 100 (within ``tolerance``).

    An empty GA list warns like any other short sum. Empty CO and PO lists
    do not: an assessment need not address course or program outcomes.
    """
    kind = _as_kind(kind)
    if not mapping_list and kind is not MappingKind.GA:
        return []
    total = sum(entry.weightage for entry in mapping_list)
    if abs(total - 100) <= tolerance:
        return []
    return [IntegrityWarning(
        kind='mapping_weights',
        message=f"{kind.value} weightages for assessment {assessment_id} sum to {total:g}, not 100",
        details={'assessment_id': assessment_id, 'mapping_kind': kind.value, 'total': total}
    )]


def validate_catalog_references(assessment: Assessment, course: Course) -> None:
    """Raise ValidationError if the assessment maps CO/PO codes its course does not define."""
    if assessment.course_id != course.id:
        raise ValidationError(
            f"Assessment {assessment.id} belongs to course {assessment.course_id}, not {course.id}",
            error_code="course_mismatch",
            details={'assessment_id': assessment.id, 'course_id': course.id}
        )
    for kind, catalog in ((MappingKind.CO, course.co_codes()), (MappingKind.PO, course.po_codes())):
        dangling = [entry.code for entry in _entries(assessment, SELECTORS[kind]) if entry.code not in catalog]
        if dangling:
            raise ValidationError(
                f"Assessment {assessment.id} maps {kind.value} codes missing from course "
                f"{course.code}: {', '.join(dangling)}",
                error_code="dangling_reference",
                details={'assessment_id': assessment.id, 'course_id': course.id,
                         'mapping_kind': kind.value, 'codes': dangling}
            )


def review_assessment(assessment: Assessment, course: Optional[Course] = None,
                      tolerance: float = DEFAULT_WEIGHT_TOLERANCE) -> List[IntegrityWarning]:
    """Weight warnings for all three mapping kinds; checks catalog references when ``course`` is given."""
    if course is not None:
        validate_catalog_references(assessment, course)
    warnings: List[IntegrityWarning] = []
    for kind, selector in SELECTORS.items():
        warnings.extend(validate_mapping_weights(
            list(_entries(assessment, selector)), assessment.id, kind, tolerance))
    return warnings


def check_assessment_references(student_assessments: Iterable[StudentAssessment],
                                assessments: Iterable[Assessment]) -> List[IntegrityWarning]:
    known = {assessment.id for assessment in assessments}
    return [
        IntegrityWarning(
            kind='unknown_assessment',
            message=f"Student assessment {record.id} references unknown assessment {record.assessment_id}",
            details={'student_assessment_id': record.id, 'assessment_id': record.assessment_id}
        )
        for record in student_assessments if record.assessment_id not in known
    ]


# ---------------------------------------------------------------------------
# Credit-weighted outcome reports
# ---------------------------------------------------------------------------

@dataclass
class GAReportEntry:
    total_score: float = 0.0
    average_score: float = 0.0
    level: ProficiencyLevel = ProficiencyLevel.INTRODUCTORY
    assessment_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_score': self.total_score,
            'average_score': self.average_score,
            'level': self.level.value,
            'assessment_count': self.assessment_count,
        }


@dataclass
class StudentGAReport:
    student_id: str
    student_name: str
    roll_number: str
    ga_scores: Dict[str, GAReportEntry] = field(default_factory=dict)
    overall: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'student_id': self.student_id,
            'student_name': self.student_name,
            'roll_number': self.roll_number,
            'ga_scores': {code: entry.to_dict() for code, entry in self.ga_scores.items()},
            'overall': self.overall,
        }


@dataclass(frozen=True)
class OutcomeAchievement:
    code: str
    value: float
    student_count: int
    average_weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'value': self.value,
                'student_count': self.student_count, 'average_weight': self.average_weight}


def _course_credit(course: Optional[Course]) -> int:
    return max(1, (course.credits if course else 0) or 1)


def build_student_ga_reports(students: Iterable[Student], assessments: Iterable[Assessment],
                             courses: Iterable[Course],
                             student_assessments: Iterable[StudentAssessment]) -> List[StudentGAReport]:
    """Per-student GA report, credit-weighted across the supplied assessments.

    For each GA, ``average_score = sum(percent * weightage/100 * credits) / sum(credits)``
    with ``credits = max(1, course.credits)``. Evaluations of assessments not in
    ``assessments`` are ignored.
    """
    assessments_by_id = {a.id: a for a in assessments}
    courses_by_id = {c.id: c for c in courses}
    ga_codes = list(coverage_by_code(assessments_by_id.values(), GA_MAPPING))

    records_by_student: Dict[str, List[StudentAssessment]] = {}
    for record in student_assessments:
        if record.assessment_id in assessments_by_id:
            records_by_student.setdefault(record.student_id, []).append(record)

    reports = []
    for student in students:
        entries = {code: GAReportEntry() for code in ga_codes}
        credit_sums = {code: 0 for code in ga_codes}
        for record in records_by_student.get(student.id, []):
            assessment = assessments_by_id[record.assessment_id]
            credit = _course_credit(courses_by_id.get(assessment.course_id))
            percent = percentage(record)
            for mapping in assessment.ga_mapping:
                entry = entries[mapping.ga_code]
                entry.total_score += percent * (mapping.weightage / 100) * credit
                entry.assessment_count += 1
                credit_sums[mapping.ga_code] += credit

        for code, entry in entries.items():
            if credit_sums[code] > 0:
                entry.average_score = entry.total_score / credit_sums[code]
                entry.level = classify_level(entry.average_score)

        scored = [entry.average_score for entry in entries.values() if entry.assessment_count > 0]
        reports.append(StudentGAReport(
            student_id=student.id,
            student_name=student.name,
            roll_number=student.roll_number,
            ga_scores=entries,
            overall=sum(scored) / len(scored) if scored else 0.0,
        ))
    return reports


def outcome_achievement(student_assessments: Iterable[StudentAssessment], assessments: Iterable[Assessment],
                        courses: Iterable[Course], selector: MappingSelector) -> List[OutcomeAchievement]:
    """Credit-weighted achievement per code for the mapping list picked by ``selector``."""
    assessments = list(assessments)
    assessments_by_id = {a.id: a for a in assessments}
    courses_by_id = {c.id: c for c in courses}
    average_weights = average_weight_by_code(assessments, selector)

    totals = {code: 0.0 for code in average_weights}
    credit_sums = {code: 0 for code in average_weights}
    students: Dict[str, set] = {code: set() for code in average_weights}
    for record in student_assessments:
        assessment = assessments_by_id.get(record.assessment_id)
        if assessment is None:
            continue
        credit = _course_credit(courses_by_id.get(assessment.course_id))
        percent = percentage(record)
        for entry in _entries(assessment, selector):
            totals[entry.code] += percent * entry.weightage / 100 * credit
            credit_sums[entry.code] += credit
            students[entry.code].add(record.student_id)

    return [
        OutcomeAchievement(
            code=code,
            value=totals[code] / credit_sums[code] if credit_sums[code] else 0.0,
            student_count=len(students[code]),
            average_weight=average_weights[code],
        )
        for code in average_weights
    ]


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------

STRENGTH_THRESHOLD = 85.0
IMPROVEMENT_THRESHOLD = 60.0
FOCUS_THRESHOLD = 75.0

_PRIORITY = {RecommendationType.IMPROVEMENT: 0, RecommendationType.FOCUS: 1, RecommendationType.STRENGTH: 2}


@dataclass(frozen=True)
class Recommendation:
    kind: RecommendationType
    ga_code: str
    ga_name: str
    current_score: float
    target_score: float
    message: str
    actions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind.value,
            'ga_code': self.ga_code,
            'ga_name': self.ga_name,
            'current_score': self.current_score,
            'target_score': self.target_score,
            'message': self.message,
            'actions': list(self.actions),
        }


def _recommend(attribute: GraduateAttribute, average: Optional[float]) -> Optional[Recommendation]:
    code = attribute.code
    if average is None:
        return Recommendation(
            RecommendationType.FOCUS, code, attribute.name, 0.0, 70.0,
            f"No assessments completed for {code}. This is an important area to focus on.",
            ("Participate in upcoming assessments that map to this GA",
             "Review course materials related to this graduate attribute",
             "Seek guidance from faculty on how to improve in this area"))
    if average >= STRENGTH_THRESHOLD:
        return Recommendation(
            RecommendationType.STRENGTH, code, attribute.name, average, 90.0,
            f"Excellent performance in {code}! You're demonstrating strong competency.",
            ("Maintain this level of performance",
             "Help peers who are struggling in this area",
             "Consider taking on leadership roles that utilize this strength"))
    if average < IMPROVEMENT_THRESHOLD:
        return Recommendation(
            RecommendationType.IMPROVEMENT, code, attribute.name, average, 70.0,
            f"{code} requires immediate attention. Current performance is below expectations.",
            ("Schedule one-on-one sessions with faculty",
             "Form study groups with classmates",
             "Complete additional practice exercises",
             "Review fundamental concepts in this area"))
    if average < FOCUS_THRESHOLD:
        return Recommendation(
            RecommendationType.FOCUS, code, attribute.name, average, 80.0,
            f"{code} shows room for improvement. With focused effort, you can reach proficiency.",
            ("Dedicate extra study time to this area",
             "Seek clarification on challenging concepts",
             "Practice with real-world applications"))
    return None


def student_recommendations(student: Student, assessments: Iterable[Assessment],
                            student_assessments: Iterable[StudentAssessment],
                            attributes: Sequence[GraduateAttribute] = GRADUATE_ATTRIBUTES) -> List[Recommendation]:
    """Advice per graduate attribute from the student's mean stored GA score.

    Only evaluations of ``assessments`` count, and scores for codes outside
    ``attributes`` are ignored. A mean in [75, 85) needs no advice. Results
    are ordered improvement, then focus, then strength, catalog order within
    each kind.
    """
    assessment_ids = {a.id for a in assessments}
    scores: Dict[str, List[int]] = {attribute.code: [] for attribute in attributes}
    for record in student_assessments:
        if record.student_id != student.id or record.assessment_id not in assessment_ids:
            continue
        for ga_score in record.ga_scores:
            if ga_score.ga_code in scores:
                scores[ga_score.ga_code].append(ga_score.score)

    recommendations = []
    for attribute in attributes:
        values = scores[attribute.code]
        recommendation = _recommend(attribute, sum(values) / len(values) if values else None)
        if recommendation is not None:
            recommendations.append(recommendation)
    return sorted(recommendations, key=lambda r: _PRIORITY[r.kind])
