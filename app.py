# app.py
# Provides a Flask-based REST API for building a weekly schedule out of
# catalog courses and cycling through their section combinations.

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from catalog import (
    CatalogClient,
    load_course,
    load_course_numbers,
    load_departments,
    load_terms,
    load_years,
)
from catalog_models import Course, Occurrence, Section, weekday_to_index
from config import Config
from error_handlers import error_response, handle_errors
from planner_state import CourseLoader, PlannerState

api = Blueprint("api", __name__, url_prefix="/api")


def serialize_occurrence(occurrence: Occurrence) -> Dict[str, Any]:
    # Occurrences without clock times are kept but flagged so the grid can skip them.
    return {
        "campus": str(occurrence.campus) if occurrence.campus else None,
        "days": [str(d) for d in sorted(occurrence.weekdays, key=weekday_to_index)],
        "startTime": occurrence.start_time.strftime("%H:%M") if occurrence.start_time else None,
        "endTime": occurrence.end_time.strftime("%H:%M") if occurrence.end_time else None,
        "startDate": occurrence.start_date.isoformat(),
        "endDate": occurrence.end_date.isoformat(),
        "isExam": occurrence.is_exam,
        "schedulable": occurrence.schedulable,
    }


def serialize_section(section: Section) -> Dict[str, Any]:
    return {
        "name": section.name,
        "type": str(section.section_type),
        "isEnrollment": section.is_enrollment,
        "associatedGroup": section.associated_group,
        "instructors": sorted(str(i) for i in section.instructors),
        "occurrences": [serialize_occurrence(o) for o in section.occurrences],
    }


def serialize_course(course: Course) -> Dict[str, Any]:
    return {
        "name": course.name,
        "sections": [serialize_section(s) for s in course.sections],
    }


def _planner() -> PlannerState:
    return current_app.extensions["planner"]


def _catalog() -> CatalogClient:
    return current_app.extensions["catalog"]


def _state_payload() -> Dict[str, Any]:
    snapshot = _planner().snapshot()
    return {
        "courses": [
            {
                "name": course.name,
                "combinations": snapshot.totals[course.name],
                "combination": snapshot.indices[course.name],
                "selection": serialize_course(projection),
            }
            for course, projection in zip(snapshot.loaded, snapshot.selected)
        ],
        "hasConflicts": snapshot.has_conflicts,
    }


@api.get("/health")
def health():
    return jsonify({"status": "ok"})


@api.get("/courses")
@handle_errors
def list_courses():
    return jsonify(_state_payload())


@api.post("/courses")
@handle_errors
def add_course():
    body = request.get_json(silent=True) or {}
    name = body.get("course")
    if not (isinstance(name, str) and name.strip()):
        return error_response("course must be a non-empty string like 'CMPT 120'", 400)

    _planner().add_course(name)
    return jsonify(_state_payload()), 201


@api.delete("/courses/<name>")
@handle_errors
def remove_course(name):
    _planner().remove_course(name)
    return jsonify(_state_payload())


@api.put("/courses/<name>/combination")
@handle_errors
def set_combination(name):
    body = request.get_json(silent=True) or {}
    index = body.get("index")
    if isinstance(index, bool) or not isinstance(index, int):
        return error_response("index must be an integer", 400)

    _planner().set_combination(name, index)
    return jsonify(_state_payload())


@api.post("/combination/advance")
@handle_errors
def advance_combination():
    body = request.get_json(silent=True) or {}
    direction = body.get("direction", 1)
    if isinstance(direction, bool) or not isinstance(direction, int) or direction not in (1, -1):
        return error_response("direction must be 1 or -1", 400)

    _planner().advance(direction)
    return jsonify(_state_payload())


@api.get("/conflicts")
@handle_errors
def conflicts():
    pairs = _planner().conflicting_pairs()
    return jsonify({"hasConflicts": bool(pairs), "pairs": [list(p) for p in pairs]})


@api.get("/catalog/years")
@handle_errors
def catalog_years():
    return jsonify(load_years(_catalog()))


@api.get("/catalog/<year>/terms")
@handle_errors
def catalog_terms(year):
    return jsonify(load_terms(_catalog(), year))


@api.get("/catalog/<year>/<term>/departments")
@handle_errors
def catalog_departments(year, term):
    return jsonify(load_departments(_catalog(), year, term))


@api.get("/catalog/<year>/<term>/<department>/courses")
@handle_errors
def catalog_course_numbers(year, term, department):
    return jsonify(load_course_numbers(_catalog(), year, term, department))


def create_app(
    config: Optional[Config] = None,
    client: Optional[CatalogClient] = None,
    loader: Optional[CourseLoader] = None,
) -> Flask:
    config = config or Config()
    app = Flask(__name__)
    app.config.from_object(config)
    app.logger.setLevel(config.LOG_LEVEL)

    if client is None:
        client = CatalogClient(config.CATALOG_BASE_URL, config.CATALOG_MAX_RETRIES)
    if loader is None:
        def loader(department, number):
            return load_course(client, config.CATALOG_YEAR, config.CATALOG_TERM, department, number)

    app.extensions["catalog"] = client
    app.extensions["planner"] = PlannerState(loader)
    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    # Start the development server with settings from the environment.
    settings = Config()
    logging.basicConfig(level=settings.LOG_LEVEL)
    create_app(settings).run(host=settings.HOST, port=settings.PORT, debug=settings.DEBUG)
