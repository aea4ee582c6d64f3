# catalog.py
# Fetches course outlines from the catalog web service and turns them into
# Course / Section / Occurrence values.

import logging
import re
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

import requests

from catalog_models import (
    Course,
    Instructor,
    InstructorRegistry,
    Occurrence,
    Section,
    SectionType,
    string_to_campus,
    string_to_section_type,
    string_to_weekday,
)

__all__ = [
    "CatalogError", "CourseNotFound", "CatalogClient",
    "load_course", "load_section", "load_occurrence", "load_instructor",
    "load_years", "load_terms", "load_departments", "load_course_numbers",
]

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.sfu.ca/bin/wcm/course-outlines"
HEADERS = {"accept": "application/json"}

# "Mon Jan 06 00:00:00 PST 2025"; the timezone token is dropped before parsing.
_TZ_TOKEN = re.compile(r"\s[A-Z]{3,4}\s")
_DATE_FORMATS = ("%a %b %d %H:%M:%S %Y", "%Y-%m-%d")


class CatalogError(Exception):
    pass


class CourseNotFound(CatalogError):
    pass


class CatalogClient:
    """HTTP client for the course-outlines service.

    Timed-out requests are retried with an exponentially growing timeout
    (1, 2, 4, ... seconds). Any other failure is raised right away.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = 5,
        session: Optional[requests.Session] = None,
        registry: Optional[InstructorRegistry] = None,
    ):
        self.base_url = base_url
        self.max_retries = max_retries
        self.session = session if session is not None else requests.Session()
        self.registry = registry if registry is not None else InstructorRegistry()

    def build_url(self, *parts: str) -> str:
        url = self.base_url
        parts = [p for p in parts if p]
        if parts:
            url += "?" + "/".join(parts)
        return url

    def get(self, *parts: str) -> Any:
        url = self.build_url(*parts)
        for attempt in range(self.max_retries):
            timeout = 2 ** attempt
            try:
                response = self.session.get(url, headers=HEADERS, timeout=timeout)
            except requests.Timeout as e:
                logger.error(f"Timeout error on attempt #{attempt + 1} for {url}: {e}")
                continue
            except requests.RequestException as e:
                logger.error(f"Error on attempt #{attempt + 1} for {url}: {e}")
                raise CatalogError(str(e)) from e

            if response.status_code == 404:
                raise CourseNotFound(f"Nothing found at {url}")
            try:
                response.raise_for_status()
            except requests.HTTPError as e:
                raise CatalogError(str(e)) from e
            return response.json()

        raise CatalogError("Max attempts reached.")

    def get_years(self):
        return self.get()

    def get_terms(self, year: str):
        return self.get(year)

    def get_departments(self, year: str, term: str):
        return self.get(year, term)

    def get_course_numbers(self, year: str, term: str, department: str):
        return self.get(year, term, department)

    def get_course_sections(self, year: str, term: str, department: str, number: str):
        return self.get(year, term, department, number)

    def get_course_outline(self, year: str, term: str, department: str, number: str, section: str):
        return self.get(year, term, department, number, section)


def _parse_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    cleaned = _TZ_TOKEN.sub(" ", raw.strip())
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    logger.warning(f"Unrecognised catalog date: {raw!r}")
    return None


def _parse_clock(raw: Optional[str]) -> Optional[time]:
    if not raw:
        return None
    try:
        return datetime.strptime(raw.strip(), "%H:%M").time()
    except ValueError:
        logger.warning(f"Unrecognised catalog time: {raw!r}")
        return None


def load_occurrence(data: Dict[str, Any]) -> Occurrence:
    days = data.get("days") or ""
    weekdays = frozenset(
        day for day in (string_to_weekday(token.strip()) for token in days.split(",")) if day
    )

    start_time = _parse_clock(data.get("startTime"))
    end_time = _parse_clock(data.get("endTime"))
    # Keep only well-formed clock ranges; anything else is treated as TBA.
    if start_time is None or end_time is None or start_time >= end_time:
        start_time = end_time = None

    first_day = _parse_date(data.get("startDate"))
    last_day = _parse_date(data.get("endDate"))
    start_date = first_day or date.min
    end_date = last_day or first_day or date.max
    if end_date < start_date:
        start_date, end_date = end_date, start_date

    return Occurrence(
        weekdays=weekdays,
        start_time=start_time,
        end_time=end_time,
        start_date=start_date,
        end_date=end_date,
        campus=string_to_campus(data.get("campus") or ""),
        is_exam=bool(data.get("isExam", False)),
    )


def load_instructor(data: Dict[str, Any], registry: InstructorRegistry) -> Instructor:
    return registry.get(data["name"])


def load_section(
    client: CatalogClient,
    year: str,
    term: str,
    department: str,
    number: str,
    entry: Dict[str, Any],
) -> Section:
    # entry is the section's row from the course listing; the outline holds times.
    name = entry["text"]
    outline = client.get_course_outline(year, term, department, number, name)

    try:
        associated_group = int(entry.get("associatedClass") or 0)
    except ValueError:
        associated_group = 0

    return Section(
        name=name,
        section_type=string_to_section_type(entry.get("sectionCode") or "LEC") or SectionType.LECTURE,
        occurrences=tuple(load_occurrence(d) for d in outline.get("courseSchedule") or []),
        instructors=frozenset(
            load_instructor(d, client.registry)
            for d in outline.get("instructor") or []
            if d.get("name")
        ),
        is_enrollment=entry.get("classType") == "e",
        associated_group=associated_group,
    )


def load_course(
    client: CatalogClient,
    year: str,
    term: str,
    department: str,
    number: str,
) -> Optional[Course]:
    # Catalog failures surface as an absent course.
    try:
        listing = client.get_course_sections(year, term, department, number)
        sections = [
            load_section(client, year, term, department, number, entry)
            for entry in listing
        ]
    except CatalogError as e:
        logger.error(f"Failed to load course {department} {number}: {e}")
        return None

    logger.info(f"Loaded {department} {number} with {len(sections)} section(s)")
    return Course(f"{department} {number}", sections)


def _texts(rows: List[Dict[str, Any]]) -> List[str]:
    return [row["text"] for row in rows]


def load_years(client: CatalogClient) -> List[str]:
    return _texts(client.get_years())


def load_terms(client: CatalogClient, year: str) -> List[str]:
    return _texts(client.get_terms(year))


def load_departments(client: CatalogClient, year: str, term: str) -> List[str]:
    return _texts(client.get_departments(year, term))


def load_course_numbers(client: CatalogClient, year: str, term: str, department: str) -> List[str]:
    return _texts(client.get_course_numbers(year, term, department))
