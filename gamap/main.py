"""
Main entry point for the GA mapping platform.
"""

import json
import logging
from typing import Any, Dict, Optional

from .core.entities import Assessment, Course, Faculty, GAMapping, OutcomeMapping, OutcomeRef, Student
from .core.enums import AssessmentType, ProficiencyLevel
from .core.exceptions import ConfigurationError
from .engine.outcomes import DEFAULT_WEIGHT_TOLERANCE
from .persistence import DatabaseFactory, RecordStore
from .services import EvaluationService, ReportService, Viewer
from .api.rest_api import GAMapRestAPI

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'database_type': 'sqlite',
    'database_config': {'database_path': 'gamap.db'},
    'weight_tolerance': DEFAULT_WEIGHT_TOLERANCE,
    'log_level': 'INFO',
}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Defaults overlaid with the JSON object in ``path``, if given."""
    config = dict(DEFAULT_CONFIG)
    if path:
        try:
            with open(path, 'r') as f:
                overrides = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read config file {path}: {str(e)}")
        if not isinstance(overrides, dict):
            raise ConfigurationError(f"Config file {path} must hold a JSON object")
        config.update(overrides)
    return config


def setup_logging(level: str = 'INFO') -> None:
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric_level, format='%(asctime)s - %(levelname)s - %(message)s')


class GAMapPlatform:
    """Wires the record store, services and REST API together."""

    def __init__(self, config: Optional[dict] = None):
        self._config = dict(DEFAULT_CONFIG)
        self._config.update(config or {})
        self._initialize_platform()

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        db_type = self._config.get('database_type', 'sqlite')
        db_config = self._config.get('database_config', {})
        self._database = DatabaseFactory.create_database(db_type, **db_config)
        logger.info("Database initialized: %s", db_type)

        self._store = RecordStore(self._database)

        tolerance = float(self._config.get('weight_tolerance', DEFAULT_WEIGHT_TOLERANCE))
        if tolerance < 0:
            raise ConfigurationError("weight_tolerance cannot be negative")
        self._evaluation_service = EvaluationService(self._store, tolerance)
        self._report_service = ReportService(self._store, tolerance)
        logger.info("Services initialized")

        self._rest_api = GAMapRestAPI(self._store, self._evaluation_service, self._report_service)
        logger.info("GA mapping platform initialized")

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def evaluation_service(self) -> EvaluationService:
        return self._evaluation_service

    @property
    def report_service(self) -> ReportService:
        return self._report_service

    @property
    def app(self):
        return self._rest_api.app

    def start_rest_server(self, host: str = "127.0.0.1", port: int = 8000):
        """Start the REST server (blocks until interrupted)."""
        import uvicorn

        logger.info("Starting REST server on %s:%s", host, port)
        uvicorn.run(self.app, host=host, port=port, log_level=str(self._config.get('log_level', 'info')).lower())

    def create_sample_data(self) -> None:
        """Small fixed cohort used by ``--demo``."""
        faculty = self._evaluation_service.register_faculty(Faculty(
            name="Dr. Meera Iyer",
            email="meera.iyer@example.edu",
            school="ASET",
            department="Computer Science & Engineering",
            batches=["2023-27"],
            sections=["A"],
            subjects=["CSE201"],
        ))
        course = self._evaluation_service.save_course(Course(
            code="CSE201",
            name="Data Structures",
            department="Computer Science & Engineering",
            semester=3,
            credits=4,
            faculty_id=faculty.id,
            faculty_name=faculty.name,
            batch="2023-27",
            co_catalog=[OutcomeRef("CO1", "Analyse algorithms"), OutcomeRef("CO2", "Implement structures")],
            po_catalog=[OutcomeRef("PO1", "Engineering knowledge"), OutcomeRef("PO2", "Problem analysis")],
        ))
        mid_term, _ = self._evaluation_service.save_assessment(Assessment(
            course_id=course.id,
            name="Mid-Term Examination",
            assessment_type=AssessmentType.MID_TERM,
            max_marks=50,
            weightage=30,
            ga_mapping=[
                GAMapping("GA1", "Engineering Knowledge", 40, ProficiencyLevel.INTERMEDIATE),
                GAMapping("GA2", "Problem Analysis", 60, ProficiencyLevel.INTRODUCTORY),
            ],
            co_mapping=[OutcomeMapping("CO1", "Analyse algorithms", 50),
                        OutcomeMapping("CO2", "Implement structures", 50)],
            po_mapping=[OutcomeMapping("PO1", "Engineering knowledge", 100)],
        ))
        quiz, _ = self._evaluation_service.save_assessment(Assessment(
            course_id=course.id,
            name="Quiz 1",
            assessment_type=AssessmentType.QUIZ,
            max_marks=10,
            weightage=10,
            ga_mapping=[GAMapping("GA1", "Engineering Knowledge", 100, ProficiencyLevel.INTRODUCTORY)],
            co_mapping=[OutcomeMapping("CO1", "Analyse algorithms", 100)],
        ))

        marks = [("A2305001", "Aarav Shah", 45, 9), ("A2305002", "Diya Rao", 31, 7),
                 ("A2305003", "Kabir Nair", 38, 6)]
        for roll_number, name, mid_marks, quiz_marks in marks:
            student = self._evaluation_service.save_student(Student(
                roll_number=roll_number,
                name=name,
                email=f"{roll_number.lower()}@example.edu",
                department="Computer Science & Engineering",
                batch="2023-27",
                semester=3,
                section="A",
            ))
            self._evaluation_service.record_evaluation(student.id, mid_term.id, mid_marks, faculty.id)
            self._evaluation_service.record_evaluation(student.id, quiz.id, quiz_marks, faculty.id)
        logger.info("Sample data created")

    def run_demo(self) -> Dict[str, Any]:
        """Load the sample cohort and print its summary."""
        self.create_sample_data()
        summary = self._report_service.data_summary(Viewer.admin())
        print(json.dumps(summary, indent=2))
        print(self._report_service.export_csv(Viewer.admin(), "student"))
        return summary


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="GA Mapping Platform")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="REST server host")
    parser.add_argument("--port", type=int, default=8000, help="REST server port")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--config", type=str, help="Configuration file path")

    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config.get('log_level', 'INFO'))

    platform = GAMapPlatform(config)
    try:
        if args.demo:
            platform.run_demo()
        else:
            platform.start_rest_server(args.host, args.port)
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
