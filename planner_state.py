# planner_state.py
# Holds the courses a student has loaded, in load order, and the combination
# index currently chosen for each of them.

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Dict, List, Optional, Tuple

from catalog_models import Course
from combination_indexer import course_total_combinations, select_combination
from schedule_finder import advance_global_combination, conflicting_pairs, has_conflicts

__all__ = [
    "PlannerError", "DuplicateCourse", "CourseLoadFailed", "UnknownCourse",
    "PlannerState", "PlannerSnapshot", "split_course_name", "canonical_course_name",
]

logger = logging.getLogger(__name__)

# (department, number) -> loaded course, or None when it could not be loaded
CourseLoader = Callable[[str, str], Optional[Course]]


class PlannerError(ValueError):
    pass


class DuplicateCourse(PlannerError):
    pass


class CourseLoadFailed(PlannerError):
    pass


class UnknownCourse(PlannerError, LookupError):
    pass


def split_course_name(name: str) -> Tuple[str, str]:
    # "cmpt 120" -> ("CMPT", "120")
    parts = name.split()
    if len(parts) != 2:
        raise PlannerError(f"Course must look like 'DEPT NUMBER', got {name!r}")
    return parts[0].upper(), parts[1].upper()


def canonical_course_name(name: str) -> str:
    return " ".join(split_course_name(name))


@dataclass(frozen=True)
class PlannerSnapshot:
    """Everything a client needs to draw the planner, read under one lock."""
    loaded: Tuple[Course, ...]
    indices: Dict[str, int]
    totals: Dict[str, int]
    selected: Tuple[Course, ...]
    has_conflicts: bool


class PlannerState:
    def __init__(self, loader: CourseLoader):
        self._loader = loader
        self._lock = RLock()
        self.loaded: List[Course] = []
        self.indices: Dict[str, int] = {}
        self.totals: Dict[str, int] = {}

    def _course(self, name: str) -> Course:
        for course in self.loaded:
            if course.name == name:
                return course
        raise UnknownCourse(f"{name} is not loaded")

    def add_course(self, name: str) -> Course:
        department, number = split_course_name(name)
        course_name = canonical_course_name(name)
        with self._lock:
            if course_name in self.indices:
                raise DuplicateCourse("Course already added!")

            course = self._loader(department, number)
            if course is None:
                raise CourseLoadFailed(f"Error loading course {course_name}!")
            total = course_total_combinations(course)
            if total == 0:
                raise CourseLoadFailed(f"{course_name} has no sections")

            self.loaded.append(course)
            self.indices[course.name] = 0
            self.totals[course.name] = total
        logger.info(f"Added {course.name} ({total} combination(s))")
        return course

    def remove_course(self, name: str) -> None:
        name = canonical_course_name(name)
        with self._lock:
            course = self._course(name)
            self.loaded.remove(course)
            del self.indices[name]
            del self.totals[name]
        logger.info(f"Removed {name}")

    def set_combination(self, name: str, value: int) -> int:
        name = canonical_course_name(name)
        # Out-of-range requests are clamped here, never inside the indexer.
        with self._lock:
            self._course(name)
            value = min(max(value, 0), self.totals[name] - 1)
            self.indices[name] = value
            return value

    def advance(self, direction: int) -> Dict[str, int]:
        with self._lock:
            self.indices = advance_global_combination(self.loaded, self.indices, direction)
            return dict(self.indices)

    def selected_courses(self) -> List[Course]:
        with self._lock:
            return [select_combination(c, self.indices[c.name]) for c in self.loaded]

    def snapshot(self) -> PlannerSnapshot:
        with self._lock:
            selected = tuple(self.selected_courses())
            return PlannerSnapshot(
                loaded=tuple(self.loaded),
                indices=dict(self.indices),
                totals=dict(self.totals),
                selected=selected,
                has_conflicts=has_conflicts(selected),
            )

    def has_conflicts(self) -> bool:
        return has_conflicts(self.selected_courses())

    def conflicting_pairs(self) -> List[Tuple[str, str]]:
        return conflicting_pairs(self.selected_courses())
