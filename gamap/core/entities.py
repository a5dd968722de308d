"""
Core records for the GA mapping platform.

Entities are immutable once built: every property is read-only and an update
is expressed as ``entity.replace(**changes)``, which returns a new record with
the same id and a bumped version.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .enums import AssessmentType, ProficiencyLevel
from .exceptions import ValidationError
from .schools import school_for_department


def _parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _as_level(value: Union[str, ProficiencyLevel]) -> ProficiencyLevel:
    if isinstance(value, ProficiencyLevel):
        return value
    try:
        return ProficiencyLevel(value)
    except ValueError:
        raise ValidationError(f"Unknown proficiency level: {value}", error_code="invalid_level")


@dataclass(frozen=True)
class OutcomeRef:
    """A CO or PO catalog entry owned by a course."""
    code: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutcomeRef":
        return cls(code=data['code'], name=data.get('name', ''))


@dataclass(frozen=True)
class GAMapping:
    """Graduate attribute weighting declared on an assessment."""
    ga_code: str
    ga_name: str
    weightage: float
    target_level: ProficiencyLevel = ProficiencyLevel.INTRODUCTORY

    def __post_init__(self):
        object.__setattr__(self, 'target_level', _as_level(self.target_level))

    @property
    def code(self) -> str:
        return self.ga_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ga_code': self.ga_code,
            'ga_name': self.ga_name,
            'weightage': self.weightage,
            'target_level': self.target_level.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GAMapping":
        return cls(
            ga_code=data['ga_code'],
            ga_name=data.get('ga_name', ''),
            weightage=data['weightage'],
            target_level=data.get('target_level', ProficiencyLevel.INTRODUCTORY.value),
        )


@dataclass(frozen=True)
class OutcomeMapping:
    """CO or PO weighting declared on an assessment."""
    code: str
    name: str
    weightage: float

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'name': self.name, 'weightage': self.weightage}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutcomeMapping":
        return cls(code=data['code'], name=data.get('name', ''), weightage=data['weightage'])


@dataclass(frozen=True)
class GAScore:
    """Score a student earned against one GA mapping."""
    ga_code: str
    score: int
    level: ProficiencyLevel
    weightage: float

    def __post_init__(self):
        object.__setattr__(self, 'level', _as_level(self.level))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ga_code': self.ga_code,
            'score': self.score,
            'level': self.level.value,
            'weightage': self.weightage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GAScore":
        return cls(
            ga_code=data['ga_code'],
            score=data['score'],
            level=data['level'],
            weightage=data['weightage'],
        )


class AbstractEntity(ABC):
    """Base record with id, timestamps and version."""

    def __init__(self, entity_id: Optional[str] = None, created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None, version: int = 1):
        self._id = entity_id or str(uuid.uuid4())
        self._created_at = _parse_datetime(created_at) or datetime.now(timezone.utc)
        self._updated_at = _parse_datetime(updated_at) or self._created_at
        self._version = version

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def version(self) -> int:
        return self._version

    @abstractmethod
    def _fields(self) -> Dict[str, Any]:
        """Constructor keyword arguments describing this record."""
        pass

    def replace(self, **changes) -> "AbstractEntity":
        """Return a new version of this record with ``changes`` applied."""
        fields = self._fields()
        unknown = set(changes) - set(fields)
        if unknown:
            raise ValidationError(
                f"Unknown fields for {self.__class__.__name__}: {sorted(unknown)}",
                error_code="unknown_field"
            )
        fields.update(changes)
        return self.__class__(
            entity_id=self._id,
            created_at=self._created_at,
            updated_at=datetime.now(timezone.utc),
            version=self._version + 1,
            **fields
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a JSON-compatible dictionary."""
        return {
            'id': self._id,
            'created_at': self._created_at.isoformat(),
            'updated_at': self._updated_at.isoformat(),
            'version': self._version,
        }

    @staticmethod
    def _base_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'entity_id': data['id'],
            'created_at': data.get('created_at'),
            'updated_at': data.get('updated_at'),
            'version': data.get('version', 1),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbstractEntity) or other.__class__ is not self.__class__:
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self._id, self._version))

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, version={self._version})"


class Student(AbstractEntity):
    """Student record. ``school`` falls back to the department's school."""

    def __init__(self, roll_number: str, name: str, email: str, department: str, batch: str,
                 semester: int, section: Optional[str] = None, school: Optional[str] = None,
                 enrollment_number: Optional[str] = None, mobile: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        if semester < 1:
            raise ValidationError("Semester must be at least 1", error_code="invalid_semester")
        self._roll_number = roll_number
        self._name = name
        self._email = email
        self._department = department
        self._school = school or school_for_department(department)
        self._batch = batch
        self._semester = semester
        self._section = section
        self._enrollment_number = enrollment_number
        self._mobile = mobile

    @property
    def roll_number(self) -> str:
        return self._roll_number

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> str:
        return self._email

    @property
    def department(self) -> str:
        return self._department

    @property
    def school(self) -> Optional[str]:
        return self._school

    @property
    def batch(self) -> str:
        return self._batch

    @property
    def semester(self) -> int:
        return self._semester

    @property
    def section(self) -> Optional[str]:
        return self._section

    @property
    def enrollment_number(self) -> Optional[str]:
        return self._enrollment_number

    @property
    def mobile(self) -> Optional[str]:
        return self._mobile

    def _fields(self) -> Dict[str, Any]:
        return {
            'roll_number': self._roll_number,
            'name': self._name,
            'email': self._email,
            'department': self._department,
            'batch': self._batch,
            'semester': self._semester,
            'section': self._section,
            'school': self._school,
            'enrollment_number': self._enrollment_number,
            'mobile': self._mobile,
        }

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update(self._fields())
        return base_dict

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Student":
        return cls(
            roll_number=data['roll_number'],
            name=data['name'],
            email=data['email'],
            department=data['department'],
            batch=data['batch'],
            semester=data['semester'],
            section=data.get('section'),
            school=data.get('school'),
            enrollment_number=data.get('enrollment_number'),
            mobile=data.get('mobile'),
            **cls._base_kwargs(data)
        )


def _catalog(entries: Iterable[Union[OutcomeRef, Dict[str, Any]]], kind: str) -> Tuple[OutcomeRef, ...]:
    catalog = tuple(e if isinstance(e, OutcomeRef) else OutcomeRef.from_dict(e) for e in entries)
    codes = [entry.code for entry in catalog]
    duplicates = sorted({code for code in codes if codes.count(code) > 1})
    if duplicates:
        raise ValidationError(
            f"Duplicate {kind} codes in course catalog: {', '.join(duplicates)}",
            error_code="duplicate_catalog_code",
            details={'kind': kind, 'codes': duplicates}
        )
    return catalog


class Course(AbstractEntity):
    """Course record owning its CO and PO catalogs."""

    def __init__(self, code: str, name: str, department: str, semester: int, credits: int,
                 faculty_id: str, faculty_name: str, batch: Optional[str] = None,
                 school: Optional[str] = None, co_catalog: Iterable[OutcomeRef] = (),
                 po_catalog: Iterable[OutcomeRef] = (), **kwargs):
        super().__init__(**kwargs)
        if credits < 0:
            raise ValidationError("Credits cannot be negative", error_code="invalid_credits")
        self._code = code
        self._name = name
        self._department = department
        self._school = school or school_for_department(department)
        self._batch = batch
        self._semester = semester
        self._credits = credits
        self._faculty_id = faculty_id
        self._faculty_name = faculty_name
        self._co_catalog = _catalog(co_catalog, "CO")
        self._po_catalog = _catalog(po_catalog, "PO")

    @property
    def code(self) -> str:
        return self._code

    @property
    def name(self) -> str:
        return self._name

    @property
    def department(self) -> str:
        return self._department

    @property
    def school(self) -> Optional[str]:
        return self._school

    @property
    def batch(self) -> Optional[str]:
        return self._batch

    @property
    def semester(self) -> int:
        return self._semester

    @property
    def credits(self) -> int:
        return self._credits

    @property
    def faculty_id(self) -> str:
        return self._faculty_id

    @property
    def faculty_name(self) -> str:
        return self._faculty_name

    @property
    def co_catalog(self) -> Tuple[OutcomeRef, ...]:
        return self._co_catalog

    @property
    def po_catalog(self) -> Tuple[OutcomeRef, ...]:
        return self._po_catalog

    def co_codes(self) -> List[str]:
        return [entry.code for entry in self._co_catalog]

    def po_codes(self) -> List[str]:
        return [entry.code for entry in self._po_catalog]

    def _fields(self) -> Dict[str, Any]:
        return {
            'code': self._code,
            'name': self._name,
            'department': self._department,
            'semester': self._semester,
            'credits': self._credits,
            'faculty_id': self._faculty_id,
            'faculty_name': self._faculty_name,
            'batch': self._batch,
            'school': self._school,
            'co_catalog': self._co_catalog,
            'po_catalog': self._po_catalog,
        }

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update(self._fields())
        base_dict['co_catalog'] = [entry.to_dict() for entry in self._co_catalog]
        base_dict['po_catalog'] = [entry.to_dict() for entry in self._po_catalog]
        return base_dict

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Course":
        return cls(
            code=data['code'],
            name=data['name'],
            department=data['department'],
            semester=data['semester'],
            credits=data['credits'],
            faculty_id=data['faculty_id'],
            faculty_name=data['faculty_name'],
            batch=data.get('batch'),
            school=data.get('school'),
            co_catalog=[OutcomeRef.from_dict(e) for e in data.get('co_catalog', [])],
            po_catalog=[OutcomeRef.from_dict(e) for e in data.get('po_catalog', [])],
            **cls._base_kwargs(data)
        )


class Assessment(AbstractEntity):
    """Assessment record with its GA, CO and PO weightings."""

    def __init__(self, course_id: str, name: str, assessment_type: Union[str, AssessmentType],
                 max_marks: float, weightage: float, ga_mapping: Iterable[GAMapping] = (),
                 co_mapping: Iterable[OutcomeMapping] = (), po_mapping: Iterable[OutcomeMapping] = (),
                 **kwargs):
        super().__init__(**kwargs)
        if not isinstance(assessment_type, AssessmentType):
            try:
                assessment_type = AssessmentType(assessment_type)
            except ValueError:
                raise ValidationError(f"Unknown assessment type: {assessment_type}",
                                      error_code="invalid_assessment_type")
        self._course_id = course_id
        self._name = name
        self._assessment_type = assessment_type
        self._max_marks = max_marks
        self._weightage = weightage
        self._ga_mapping = tuple(ga_mapping)
        self._co_mapping = tuple(co_mapping)
        self._po_mapping = tuple(po_mapping)

    @property
    def course_id(self) -> str:
        return self._course_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def assessment_type(self) -> AssessmentType:
        return self._assessment_type

    @property
    def max_marks(self) -> float:
        return self._max_marks

    @property
    def weightage(self) -> float:
        return self._weightage

    @property
    def ga_mapping(self) -> Tuple[GAMapping, ...]:
        return self._ga_mapping

    @property
    def co_mapping(self) -> Tuple[OutcomeMapping, ...]:
        return self._co_mapping

    @property
    def po_mapping(self) -> Tuple[OutcomeMapping, ...]:
        return self._po_mapping

    def find_ga_mapping(self, ga_code: str) -> Optional[GAMapping]:
        for mapping in self._ga_mapping:
            if mapping.ga_code == ga_code:
                return mapping
        return None

    def _fields(self) -> Dict[str, Any]:
        return {
            'course_id': self._course_id,
            'name': self._name,
            'assessment_type': self._assessment_type,
            'max_marks': self._max_marks,
            'weightage': self._weightage,
            'ga_mapping': self._ga_mapping,
            'co_mapping': self._co_mapping,
            'po_mapping': self._po_mapping,
        }

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'course_id': self._course_id,
            'name': self._name,
            'assessment_type': self._assessment_type.value,
            'max_marks': self._max_marks,
            'weightage': self._weightage,
            'ga_mapping': [m.to_dict() for m in self._ga_mapping],
            'co_mapping': [m.to_dict() for m in self._co_mapping],
            'po_mapping': [m.to_dict() for m in self._po_mapping],
        })
        return base_dict

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assessment":
        return cls(
            course_id=data['course_id'],
            name=data['name'],
            assessment_type=data['assessment_type'],
            max_marks=data['max_marks'],
            weightage=data['weightage'],
            ga_mapping=[GAMapping.from_dict(m) for m in data.get('ga_mapping', [])],
            co_mapping=[OutcomeMapping.from_dict(m) for m in data.get('co_mapping', [])],
            po_mapping=[OutcomeMapping.from_dict(m) for m in data.get('po_mapping', [])],
            **cls._base_kwargs(data)
        )


class StudentAssessment(AbstractEntity):
    """A student's evaluated result on one assessment."""

    def __init__(self, student_id: str, assessment_id: str, marks_obtained: float, max_marks: float,
                 ga_scores: Iterable[GAScore] = (), submitted_at: Optional[datetime] = None,
                 evaluated_by: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self._student_id = student_id
        self._assessment_id = assessment_id
        self._marks_obtained = marks_obtained
        self._max_marks = max_marks
        self._ga_scores = tuple(ga_scores)
        self._submitted_at = _parse_datetime(submitted_at) or self._created_at
        self._evaluated_by = evaluated_by

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def assessment_id(self) -> str:
        return self._assessment_id

    @property
    def marks_obtained(self) -> float:
        return self._marks_obtained

    @property
    def max_marks(self) -> float:
        return self._max_marks

    @property
    def ga_scores(self) -> Tuple[GAScore, ...]:
        return self._ga_scores

    @property
    def submitted_at(self) -> datetime:
        return self._submitted_at

    @property
    def evaluated_by(self) -> Optional[str]:
        return self._evaluated_by

    def _fields(self) -> Dict[str, Any]:
        return {
            'student_id': self._student_id,
            'assessment_id': self._assessment_id,
            'marks_obtained': self._marks_obtained,
            'max_marks': self._max_marks,
            'ga_scores': self._ga_scores,
            'submitted_at': self._submitted_at,
            'evaluated_by': self._evaluated_by,
        }

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'student_id': self._student_id,
            'assessment_id': self._assessment_id,
            'marks_obtained': self._marks_obtained,
            'max_marks': self._max_marks,
            'ga_scores': [s.to_dict() for s in self._ga_scores],
            'submitted_at': self._submitted_at.isoformat(),
            'evaluated_by': self._evaluated_by,
        })
        return base_dict

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudentAssessment":
        return cls(
            student_id=data['student_id'],
            assessment_id=data['assessment_id'],
            marks_obtained=data['marks_obtained'],
            max_marks=data['max_marks'],
            ga_scores=[GAScore.from_dict(s) for s in data.get('ga_scores', [])],
            submitted_at=data.get('submitted_at'),
            evaluated_by=data.get('evaluated_by'),
            **cls._base_kwargs(data)
        )


class Faculty(AbstractEntity):
    """Faculty member and the cohorts they teach."""

    def __init__(self, name: str, email: str, school: str, department: str,
                 batches: Iterable[str] = (), sections: Iterable[str] = (), subjects: Iterable[str] = (),
                 initial_password: Optional[str] = None, is_activated: bool = False, **kwargs):
        super().__init__(**kwargs)
        self._name = name
        self._email = email
        self._school = school
        self._department = department
        self._batches = tuple(batches)
        self._sections = tuple(sections)
        self._subjects = tuple(subjects)
        self._initial_password = initial_password
        self._is_activated = is_activated

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> str:
        return self._email

    @property
    def school(self) -> str:
        return self._school

    @property
    def department(self) -> str:
        return self._department

    @property
    def batches(self) -> Tuple[str, ...]:
        return self._batches

    @property
    def sections(self) -> Tuple[str, ...]:
        return self._sections

    @property
    def subjects(self) -> Tuple[str, ...]:
        return self._subjects

    @property
    def initial_password(self) -> Optional[str]:
        return self._initial_password

    @property
    def is_activated(self) -> bool:
        return self._is_activated

    def _fields(self) -> Dict[str, Any]:
        return {
            'name': self._name,
            'email': self._email,
            'school': self._school,
            'department': self._department,
            'batches': self._batches,
            'sections': self._sections,
            'subjects': self._subjects,
            'initial_password': self._initial_password,
            'is_activated': self._is_activated,
        }

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update(self._fields())
        for key in ('batches', 'sections', 'subjects'):
            base_dict[key] = list(base_dict[key])
        return base_dict

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Faculty":
        return cls(
            name=data['name'],
            email=data['email'],
            school=data['school'],
            department=data['department'],
            batches=data.get('batches', []),
            sections=data.get('sections', []),
            subjects=data.get('subjects', []),
            initial_password=data.get('initial_password'),
            is_activated=data.get('is_activated', False),
            **cls._base_kwargs(data)
        )
