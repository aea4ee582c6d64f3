# schedule_finder.py
# Detects time conflicts between selected courses and steps the global
# combination odometer to the next conflict-free arrangement.

import logging
from itertools import combinations
from typing import Dict, List, Mapping, Sequence, Tuple

from catalog_models import Course, Occurrence, Section
from combination_indexer import (
    IndexOutOfRange,
    build_enrollment_options,
    option_combinations,
    select_from_options,
)

__all__ = [
    "occurrences_overlap", "sections_overlap", "courses_overlap",
    "has_conflicts", "conflicting_pairs",
    "odometer_step", "cycle_to_conflict_free", "advance_global_combination",
]

logger = logging.getLogger(__name__)


def occurrences_overlap(a: Occurrence, b: Occurrence) -> bool:
    # Occurrences without clock times never conflict.
    if not (a.schedulable and b.schedulable):
        return False
    return (
        a.start_date <= b.end_date and b.start_date <= a.end_date
        and bool(a.weekdays & b.weekdays)
        # Half-open: back-to-back occurrences do not clash.
        and a.start_time < b.end_time and b.start_time < a.end_time
    )


def sections_overlap(s1: Section, s2: Section) -> bool:
    return any(
        occurrences_overlap(o1, o2)
        for o1 in s1.occurrences
        for o2 in s2.occurrences
    )


def courses_overlap(c1: Course, c2: Course) -> bool:
    return any(sections_overlap(s1, s2) for s1 in c1.sections for s2 in c2.sections)


def has_conflicts(courses: Sequence[Course]) -> bool:
    return any(courses_overlap(a, b) for a, b in combinations(courses, 2))


def conflicting_pairs(courses: Sequence[Course]) -> List[Tuple[str, str]]:
    # Names of every pair of selected courses that double-book a time.
    return [(a.name, b.name) for a, b in combinations(courses, 2) if courses_overlap(a, b)]


def odometer_step(digits: Sequence[int], totals: Sequence[int], direction: int) -> Tuple[int, ...]:
    """Move the odometer one position in ``direction`` (+1 or -1).

    The last digit is the least significant. A digit that runs past either
    end wraps around and carries into the digit before it; the carry stops
    at the first digit that does not wrap.
    """
    if direction not in (1, -1):
        raise ValueError(f"direction must be 1 or -1, got {direction}")
    if len(digits) != len(totals):
        raise ValueError("digits and totals must have the same length")

    stepped = list(digits)
    for position in reversed(range(len(stepped))):
        value = stepped[position] + direction
        if value < 0:
            stepped[position] = totals[position] - 1
        elif value >= totals[position]:
            stepped[position] = 0
        else:
            stepped[position] = value
            break
    return tuple(stepped)


def cycle_to_conflict_free(
    courses: Sequence[Course],
    start: Sequence[int],
    direction: int,
) -> Tuple[Tuple[int, ...], bool]:
    """Step from ``start`` until the selected projections stop conflicting.

    Returns the reached index tuple and whether it is conflict free. When a
    whole cycle brings the odometer back to ``start`` without finding one,
    the search stops there and reports ``False``; the number of steps is
    therefore bounded by the product of the courses' combination counts.
    """
    if direction not in (1, -1):
        raise ValueError(f"direction must be 1 or -1, got {direction}")
    start = tuple(start)
    if len(start) != len(courses):
        raise ValueError("one combination index is required per course")
    if not courses:
        return start, True

    options = [build_enrollment_options(c.sections) for c in courses]
    totals = [sum(option_combinations(o) for o in opts) for opts in options]
    for course, index, total in zip(courses, start, totals):
        if total == 0:
            raise ValueError(f"{course.name} has no section combinations")
        if not 0 <= index < total:
            raise IndexOutOfRange(index, total)

    current = start
    while True:
        current = odometer_step(current, totals, direction)
        selection = [
            select_from_options(course.name, opts, index)
            for course, opts, index in zip(courses, options, current)
        ]
        if not has_conflicts(selection):
            return current, True
        if current == start:
            return current, False


def advance_global_combination(
    courses: Sequence[Course],
    indices: Mapping[str, int],
    direction: int,
) -> Dict[str, int]:
    # Courses are in load order; the last loaded course turns fastest.
    start = tuple(indices[course.name] for course in courses)
    reached, resolved = cycle_to_conflict_free(courses, start, direction)
    if resolved:
        logger.info(f"Advanced global combination {start} -> {reached}")
    else:
        logger.warning(f"No conflict-free combination exists for {len(courses)} course(s); kept {reached}")
    return {course.name: index for course, index in zip(courses, reached)}
