"""
School catalog used to derive a record's school from its department.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class School:
    id: str
    name: str
    full_name: str
    departments: Tuple[str, ...]


SCHOOLS: Tuple[School, ...] = (
    School("aset", "ASET", "Amity School of Engineering & Technology", (
        "Electronics & Communication Engineering",
        "Computer Science & Engineering",
        "Information Technology",
        "Mechanical Engineering",
        "Civil Engineering",
        "Electrical & Electronics Engineering",
        "Data Science",
        "Chemical Engineering",
    )),
    School("aiit", "AIIT", "Amity Institute of Information Technology", (
        "Computer Science & Applications",
        "Information Communication Technologies",
    )),
    School("abs", "ABS", "Amity Business School", (
        "Bachelor of Business Administration (BBA)",
        "Integrated BBA-MBA",
        "Ph.D. in Management",
    )),
    School("als", "Amity Law School (ALS)", "Amity Law School", (
        "B.A. LL.B. (Hons)",
        "B.Com. LL.B. (Hons)",
        "BBA LL.B. (Hons)",
        "LL.M. in Constitutional Law",
        "LL.M. in Corporate and Commercial Law",
        "LL.M. in Criminal Law",
        "Ph.D. in Law",
    )),
    School("asco", "ASCO", "Amity School of Communication", (
        "Certificate in Podcast & Vodcast",
        "MBA in Media Management",
        "M.A. in Journalism & Mass Communication",
        "M.A. in Advertising & Marketing Management",
    )),
    School("asft", "ASFT", "Amity School of Fashion Technology", (
        "Bachelor of Design (Fashion Design)",
        "Bachelor of Fine Arts (Animation)",
        "Master of Design (Fashion Design)",
        "Master of Fine Arts (Animation)",
    )),
    School("asfa", "ASFA", "Amity School of Fine Arts", (
        "Bachelor of Fine Arts (BFA)",
        "Bachelor of Fine Arts (Animation)",
        "Master of Fine Arts (MFA)",
    )),
    School("asap", "ASAP", "Amity School of Architecture & Planning", (
        "Bachelor of Architecture (B.Arch)",
        "Master of Architecture (M.Arch)",
        "Bachelor of Planning (B.Plan)",
        "Master of Planning (M.Plan)",
    )),
    School("asla", "ASLA", "Amity School of Liberal Arts", (
        "Bachelor of Arts (BA)",
        "Master of Arts (MA)",
    )),
)


def school_for_department(department: Optional[str]) -> Optional[str]:
    """Return the name of the first school offering ``department``, or None."""
    if not department:
        return None
    for school in SCHOOLS:
        if department in school.departments:
            return school.name
    return None


def departments_for_school(school_name: str) -> List[str]:
    for school in SCHOOLS:
        if school.name == school_name:
            return list(school.departments)
    return []


def schools_with_records(records: Iterable) -> List[str]:
    """Schools represented by ``records`` (anything with school/department), first-seen order."""
    seen: List[str] = []
    for record in records:
        name = getattr(record, "school", None) or school_for_department(getattr(record, "department", None))
        if name and name not in seen:
            seen.append(name)
    return seen
