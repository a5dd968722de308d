"""
REST API for the GA mapping platform using FastAPI.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ..core.entities import (
    Assessment, Course, Faculty, GAMapping, OutcomeMapping, OutcomeRef, Student
)
from ..core.enums import Role
from ..core.graduate_attributes import GRADUATE_ATTRIBUTES
from ..core.exceptions import (
    AuthorizationError, DuplicateEntityError, GAMapException, ResourceNotFoundError, ValidationError
)
from ..persistence.store import RecordStore
from ..services import EvaluationService, ReportService, Viewer

API_VERSION = "1.0.0"

LEVEL_PATTERN = r'^(Introductory|Intermediate|Advanced)$'
TYPE_PATTERN = r'^(Quiz|Assignment|Mid-Term|End-Term|Project|Lab|Presentation)$'


# Pydantic models for API
class StudentCreate(BaseModel):
    roll_number: str = Field(..., min_length=1, max_length=40)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r'^[^@]+@[^@]+\.[^@]+$')
    department: str = Field(..., min_length=1, max_length=200)
    batch: str = Field(..., min_length=1, max_length=20)
    semester: int = Field(..., ge=1, le=12)
    section: Optional[str] = None
    school: Optional[str] = None
    enrollment_number: Optional[str] = None
    mobile: Optional[str] = None


class OutcomeRefModel(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = ""


class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    department: str = Field(..., min_length=1, max_length=200)
    semester: int = Field(..., ge=1, le=12)
    credits: int = Field(..., ge=0, le=20)
    faculty_id: str = Field(..., min_length=1)
    faculty_name: str = ""
    batch: Optional[str] = None
    school: Optional[str] = None
    co_catalog: List[OutcomeRefModel] = []
    po_catalog: List[OutcomeRefModel] = []


class GAMappingModel(BaseModel):
    ga_code: str = Field(..., min_length=1, max_length=20)
    ga_name: str = ""
    weightage: float = Field(..., ge=0, le=100)
    target_level: str = Field("Introductory", pattern=LEVEL_PATTERN)


class OutcomeMappingModel(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = ""
    weightage: float = Field(..., ge=0, le=100)


class AssessmentCreate(BaseModel):
    course_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    assessment_type: str = Field(..., pattern=TYPE_PATTERN)
    max_marks: float = Field(..., gt=0)
    weightage: float = Field(..., ge=0, le=100)
    ga_mapping: List[GAMappingModel] = []
    co_mapping: List[OutcomeMappingModel] = []
    po_mapping: List[OutcomeMappingModel] = []


class FacultyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r'^[^@]+@[^@]+\.[^@]+$')
    school: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    batches: List[str] = []
    sections: List[str] = []
    subjects: List[str] = []


class EvaluationRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    assessment_id: str = Field(..., min_length=1)
    marks_obtained: float
    measured_level: bool = False


class AssessmentSaved(BaseModel):
    assessment: Dict[str, Any]
    warnings: List[Dict[str, Any]] = []


def get_viewer(x_user_id: str = Header("admin"), x_user_role: str = Header("admin"),
               x_faculty_id: Optional[str] = Header(None)) -> Viewer:
    """Viewer taken from request headers."""
    try:
        return Viewer(user_id=x_user_id, role=x_user_role, faculty_id=x_faculty_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


class GAMapRestAPI:
    """REST API over the record store and report service."""

    def __init__(self, store: RecordStore, evaluation_service: EvaluationService,
                 report_service: ReportService):
        self._store = store
        self._evaluation_service = evaluation_service
        self._report_service = report_service

        self.app = FastAPI(
            title="GA Mapping API",
            description="Graduate attribute, course outcome and program outcome reporting",
            version=API_VERSION,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    @staticmethod
    def _http_error(error: GAMapException) -> HTTPException:
        """Map a platform error onto an HTTP status code."""
        if isinstance(error, ResourceNotFoundError):
            code = status.HTTP_404_NOT_FOUND
        elif isinstance(error, AuthorizationError):
            code = status.HTTP_403_FORBIDDEN
        elif isinstance(error, DuplicateEntityError):
            code = status.HTTP_409_CONFLICT
        elif isinstance(error, ValidationError):
            code = status.HTTP_400_BAD_REQUEST
        else:
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return HTTPException(status_code=code, detail={'message': error.message, 'error_code': error.error_code,
                                                       'details': error.details})

    @staticmethod
    def _require_admin(viewer: Viewer) -> None:
        if viewer.role is not Role.ADMIN:
            raise AuthorizationError("Administrator role required", error_code="admin_required")

    def _require_course_access(self, viewer: Viewer, course_id: str) -> Course:
        course = self._store.courses.find_by_id(course_id)
        if course is None:
            raise ResourceNotFoundError(f"Course {course_id} not found", error_code="course_not_found")
        if viewer.role is Role.FACULTY and course.faculty_id != viewer.faculty_id:
            raise AuthorizationError("Course is owned by another faculty member", error_code="not_course_owner")
        return course

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            return {"message": "GA Mapping API", "version": API_VERSION, "docs": "/docs"}

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        @self.app.get("/graduate-attributes")
        def list_graduate_attributes():
            return [attribute.to_dict() for attribute in GRADUATE_ATTRIBUTES]

        # Student endpoints
        @self.app.post("/students", status_code=status.HTTP_201_CREATED)
        def create_student(student_data: StudentCreate, viewer: Viewer = Depends(get_viewer)):
            try:
                self._require_admin(viewer)
                student = Student(**student_data.model_dump())
                return self._evaluation_service.save_student(student).to_dict()
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/students")
        def list_students(batch: Optional[str] = None, section: Optional[str] = None,
                          skip: int = 0, limit: int = 100, viewer: Viewer = Depends(get_viewer)):
            try:
                students = self._report_service.scope(viewer, batch, section).students
                return [s.to_dict() for s in students[skip:skip + limit]]
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/students/{student_id}")
        def get_student(student_id: str, viewer: Viewer = Depends(get_viewer)):
            try:
                return self._report_service.visible_student(viewer, student_id).to_dict()
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.delete("/students/{student_id}")
        def delete_student(student_id: str, viewer: Viewer = Depends(get_viewer)):
            try:
                self._require_admin(viewer)
                removed = self._evaluation_service.delete_student(student_id)
                return {"deleted": student_id, "evaluations_removed": removed}
            except GAMapException as e:
                raise self._http_error(e)

        # Course endpoints
        @self.app.post("/courses", status_code=status.HTTP_201_CREATED)
        def create_course(course_data: CourseCreate, viewer: Viewer = Depends(get_viewer)):
            try:
                self._require_admin(viewer)
                fields = course_data.model_dump(exclude={'co_catalog', 'po_catalog'})
                course = Course(
                    co_catalog=[OutcomeRef(**entry.model_dump()) for entry in course_data.co_catalog],
                    po_catalog=[OutcomeRef(**entry.model_dump()) for entry in course_data.po_catalog],
                    **fields
                )
                return self._evaluation_service.save_course(course).to_dict()
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/courses")
        def list_courses(viewer: Viewer = Depends(get_viewer)):
            return [c.to_dict() for c in self._report_service.scope(viewer).courses]

        @self.app.get("/courses/{course_id}")
        def get_course(course_id: str, viewer: Viewer = Depends(get_viewer)):
            try:
                return self._require_course_access(viewer, course_id).to_dict()
            except GAMapException as e:
                raise self._http_error(e)

        # Assessment endpoints
        @self.app.post("/assessments", response_model=AssessmentSaved, status_code=status.HTTP_201_CREATED)
        def create_assessment(assessment_data: AssessmentCreate, viewer: Viewer = Depends(get_viewer)):
            try:
                self._require_course_access(viewer, assessment_data.course_id)
                assessment = Assessment(
                    course_id=assessment_data.course_id,
                    name=assessment_data.name,
                    assessment_type=assessment_data.assessment_type,
                    max_marks=assessment_data.max_marks,
                    weightage=assessment_data.weightage,
                    ga_mapping=[GAMapping(**m.model_dump()) for m in assessment_data.ga_mapping],
                    co_mapping=[OutcomeMapping(**m.model_dump()) for m in assessment_data.co_mapping],
                    po_mapping=[OutcomeMapping(**m.model_dump()) for m in assessment_data.po_mapping],
                )
                saved, warnings = self._evaluation_service.save_assessment(assessment)
                return AssessmentSaved(assessment=saved.to_dict(), warnings=[w.to_dict() for w in warnings])
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/assessments")
        def list_assessments(course_id: Optional[str] = None, viewer: Viewer = Depends(get_viewer)):
            assessments = self._report_service.scope(viewer).assessments
            if course_id is not None:
                assessments = [a for a in assessments if a.course_id == course_id]
            return [a.to_dict() for a in assessments]

        # Faculty endpoints
        @self.app.post("/faculty", status_code=status.HTTP_201_CREATED)
        def create_faculty(faculty_data: FacultyCreate, viewer: Viewer = Depends(get_viewer)):
            try:
                self._require_admin(viewer)
                faculty = Faculty(**faculty_data.model_dump())
                return self._evaluation_service.register_faculty(faculty).to_dict()
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/faculty")
        def list_faculty(viewer: Viewer = Depends(get_viewer)):
            return [f.to_dict() for f in self._report_service.scope(viewer).faculty]

        # Evaluation endpoints
        @self.app.post("/evaluations", status_code=status.HTTP_201_CREATED)
        def record_evaluation(request: EvaluationRequest, viewer: Viewer = Depends(get_viewer)):
            try:
                assessment = self._store.assessments.find_by_id(request.assessment_id)
                if assessment is None:
                    raise ResourceNotFoundError(f"Assessment {request.assessment_id} not found",
                                                error_code="assessment_not_found")
                self._require_course_access(viewer, assessment.course_id)
                evaluation = self._evaluation_service.record_evaluation(
                    request.student_id, request.assessment_id, request.marks_obtained,
                    evaluated_by=viewer.user_id, measured=request.measured_level
                )
                return evaluation.to_dict()
            except GAMapException as e:
                raise self._http_error(e)

        # Report endpoints
        @self.app.get("/reports/summary")
        def report_summary(batch: Optional[str] = None, section: Optional[str] = None,
                           viewer: Viewer = Depends(get_viewer)):
            try:
                return self._report_service.data_summary(viewer, batch, section)
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/reports/coverage/{kind}")
        def report_coverage(kind: str, viewer: Viewer = Depends(get_viewer)):
            try:
                return dict(self._report_service.coverage(viewer, kind))
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/reports/students")
        def report_students(batch: Optional[str] = None, section: Optional[str] = None,
                            viewer: Viewer = Depends(get_viewer)):
            try:
                return [r.to_dict() for r in self._report_service.student_reports(viewer, batch, section)]
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/reports/students/{student_id}/recommendations")
        def report_recommendations(student_id: str, viewer: Viewer = Depends(get_viewer)):
            try:
                return [r.to_dict() for r in self._report_service.recommendations(viewer, student_id)]
            except GAMapException as e:
                raise self._http_error(e)

        @self.app.get("/reports/export/{section}", response_class=PlainTextResponse)
        def report_export(section: str, batch: Optional[str] = None, viewer: Viewer = Depends(get_viewer)):
            try:
                content = self._report_service.export_csv(viewer, section, batch)
            except GAMapException as e:
                raise self._http_error(e)
            return PlainTextResponse(
                content,
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{section}_report.csv"'}
            )
