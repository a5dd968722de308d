"""
Services module: record mutations and report generation.
"""

from .evaluation_service import EvaluationService
from .report_service import ReportService, ReportScope, Viewer, EXPORT_SECTIONS

__all__ = [
    "EvaluationService",
    "ReportService",
    "ReportScope",
    "Viewer",
    "EXPORT_SECTIONS",
]
