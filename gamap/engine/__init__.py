"""
Outcome mapping engine: stateless GA/CO/PO scoring and aggregation.
"""

from .outcomes import (
    GA_MAPPING, CO_MAPPING, PO_MAPPING, SELECTORS, selector_for,
    classify_level, classify_bucket, percentage,
    validate_marks, compute_ga_score, compute_ga_scores,
    PerformanceSummary, aggregate_performance,
    coverage_by_code, average_weight_by_code, count_by,
    validate_mapping_weights, validate_catalog_references, review_assessment,
    check_assessment_references,
    GAReportEntry, StudentGAReport, OutcomeAchievement,
    build_student_ga_reports, outcome_achievement,
    Recommendation, student_recommendations,
)

__all__ = [
    "GA_MAPPING",
    "CO_MAPPING",
    "PO_MAPPING",
    "SELECTORS",
    "selector_for",
    "classify_level",
    "classify_bucket",
    "percentage",
    "validate_marks",
    "compute_ga_score",
    "compute_ga_scores",
    "PerformanceSummary",
    "aggregate_performance",
    "coverage_by_code",
    "average_weight_by_code",
    "count_by",
    "validate_mapping_weights",
    "validate_catalog_references",
    "review_assessment",
    "check_assessment_references",
    "GAReportEntry",
    "StudentGAReport",
    "OutcomeAchievement",
    "build_student_ga_reports",
    "outcome_achievement",
    "Recommendation",
    "student_recommendations",
]
