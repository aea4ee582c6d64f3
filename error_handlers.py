import logging
from functools import wraps

from flask import jsonify

from catalog import CatalogError, CourseNotFound
from planner_state import UnknownCourse

logger = logging.getLogger(__name__)


def error_response(message, status):
    return jsonify({"success": False, "error": message}), status


def handle_errors(f):
    """Map exceptions raised by an API endpoint to JSON error responses."""
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (UnknownCourse, CourseNotFound) as e:
            logger.warning(f"Not found: {e}")
            return error_response(str(e), 404)
        except ValueError as e:
            logger.warning(f"Bad request: {e}")
            return error_response(str(e), 400)
        except CatalogError as e:
            logger.error(f"Catalog unavailable: {e}")
            return error_response("Course catalog is unavailable.", 502)
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            return error_response("Internal server error.", 500)
    return decorated
