"""
GA Mapping: Graduate Attribute, Course Outcome and Program Outcome reporting.

Records students, faculty, courses and assessments with their outcome
mappings, and computes weighted scores and cohort performance reports.
"""

__version__ = "1.0.0"
__author__ = "GA Mapping Development Team"
__description__ = "Graduate attribute mapping and outcome reporting platform"
