# catalog_models.py
# Value types for a loaded course catalog: weekdays, campuses, section types,
# occurrences, sections, courses and interned instructors.

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from threading import Lock
from typing import Dict, FrozenSet, Optional, Tuple

__all__ = [
    "WeekDay", "Campus", "SectionType", "Instructor", "InstructorRegistry",
    "Occurrence", "Section", "Course",
    "string_to_weekday", "weekday_to_index", "string_to_campus", "string_to_section_type",
]


class WeekDay(Enum):
    SUNDAY = "Su"
    MONDAY = "Mo"
    TUESDAY = "Tu"
    WEDNESDAY = "We"
    THURSDAY = "Th"
    FRIDAY = "Fr"
    SATURDAY = "Sa"

    def __str__(self) -> str:
        return self.value


class Campus(Enum):
    BURNABY = "Burnaby"
    SURREY = "Surrey"
    VANCOUVER = "Vancouver"
    ONLINE = "Online"

    def __str__(self) -> str:
        return self.value


class SectionType(Enum):
    LECTURE = "LEC"
    LAB = "LAB"
    TUTORIAL = "TUT"
    SEMINAR = "SEM"
    OPEN_LAB = "OPL"
    ONLINE = "OLC"

    def __str__(self) -> str:
        return self.value


def _from_value(enum_cls, raw):
    # Unknown codes map to None instead of raising.
    try:
        return enum_cls(raw)
    except ValueError:
        return None


def string_to_weekday(raw: str) -> Optional[WeekDay]:
    return _from_value(WeekDay, raw)


def weekday_to_index(day: WeekDay) -> int:
    # Sunday is 0, matching the catalog's week layout.
    return list(WeekDay).index(day)


def string_to_campus(raw: str) -> Optional[Campus]:
    return _from_value(Campus, raw)


def string_to_section_type(raw: str) -> Optional[SectionType]:
    return _from_value(SectionType, raw)


class Instructor:
    """An instructor, compared by identity.

    Instances are only created through an :class:`InstructorRegistry`, which
    guarantees one object per name for the lifetime of the registry.
    """

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return f"Instructor({self.name!r})"

    def __str__(self):
        return self.name


class InstructorRegistry:
    # Interning table: same name -> same Instructor object. Grows monotonically.

    def __init__(self):
        self._instances: Dict[str, Instructor] = {}
        self._lock = Lock()

    def get(self, name: str) -> Instructor:
        with self._lock:
            instructor = self._instances.get(name)
            if instructor is None:
                instructor = Instructor(name)
                self._instances[name] = instructor
            return instructor

    def __len__(self):
        return len(self._instances)

    def __contains__(self, name: str):
        return name in self._instances


@dataclass(frozen=True)
class Occurrence:
    # One recurring weekly window. Clock times may be unknown (None).
    weekdays: FrozenSet[WeekDay]
    start_time: Optional[time]
    end_time: Optional[time]
    start_date: date
    end_date: date
    campus: Optional[Campus] = None
    is_exam: bool = False

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(f"start date {self.start_date} is after end date {self.end_date}")
        if self.schedulable and self.start_time >= self.end_time:
            raise ValueError(f"start time {self.start_time} is not before end time {self.end_time}")

    @property
    def schedulable(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    def __str__(self):
        days = ", ".join(str(d) for d in sorted(self.weekdays, key=weekday_to_index))
        if self.schedulable:
            clock = f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"
        else:
            clock = "TBA"
        return f"{self.campus or 'Unknown'} {days} {clock}"


@dataclass(frozen=True, eq=False)
class Section:
    name: str
    section_type: SectionType
    occurrences: Tuple[Occurrence, ...] = ()
    instructors: FrozenSet[Instructor] = frozenset()
    is_enrollment: bool = False
    associated_group: int = 0

    def __str__(self):
        slots = ", ".join(str(o) for o in self.occurrences)
        return f"{self.name} ({self.section_type}): {slots}"


@dataclass(frozen=True, eq=False)
class Course:
    # A course as loaded, or a projection holding one pick per category.
    name: str
    sections: Tuple[Section, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any sequence but keep the stored value immutable.
        object.__setattr__(self, "sections", tuple(self.sections))

    def __str__(self):
        return f"{self.name}: " + ", ".join(str(s) for s in self.sections)
