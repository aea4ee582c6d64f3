# combination_indexer.py
# Groups a course's sections into enrollment options and addresses every
# section combination of those options by a single integer index.

from dataclasses import dataclass, fields
from math import prod
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from catalog_models import Course, Section, SectionType

__all__ = [
    "CATEGORY_ORDER", "EnrollmentOption", "IndexOutOfRange",
    "encode_digits", "decode_index", "build_enrollment_options",
    "option_combinations", "course_total_combinations",
    "select_from_options", "select_combination", "combination_index",
]

# Most significant category first.
CATEGORY_ORDER: Tuple[SectionType, ...] = (
    SectionType.LECTURE,
    SectionType.LAB,
    SectionType.TUTORIAL,
    SectionType.SEMINAR,
    SectionType.OPEN_LAB,
    SectionType.ONLINE,
)


class IndexOutOfRange(IndexError):
    """Raised when a combination index falls outside ``[0, total)``."""

    def __init__(self, index: int, total: int):
        super().__init__(f"combination index {index} is out of range [0, {total})")
        self.index = index
        self.total = total


@dataclass(frozen=True)
class EnrollmentOption:
    # group is None for the implicit option of a course without enrollment sections.
    group: Optional[int]
    lectures: Tuple[Section, ...] = ()
    labs: Tuple[Section, ...] = ()
    tutorials: Tuple[Section, ...] = ()
    seminars: Tuple[Section, ...] = ()
    open_labs: Tuple[Section, ...] = ()
    online: Tuple[Section, ...] = ()

    def categories(self) -> List[Tuple[Section, ...]]:
        # Same order as CATEGORY_ORDER; the first field is the group.
        return [getattr(self, f.name) for f in fields(self)[1:]]

    def counts(self) -> List[int]:
        return [len(category) for category in self.categories()]


def _radices(counts: Sequence[int]) -> List[int]:
    # An empty category still offers one outcome: no selection.
    return [max(count, 1) for count in counts]


def encode_digits(digits: Sequence[int], counts: Sequence[int]) -> int:
    # Mixed-radix digits (most significant first) -> integer index.
    radices = _radices(counts)
    if len(digits) != len(radices):
        raise ValueError(f"expected {len(radices)} digits, got {len(digits)}")
    index = 0
    for digit, radix in zip(digits, radices):
        if not 0 <= digit < radix:
            raise ValueError(f"digit {digit} is out of range for radix {radix}")
        index = index * radix + digit
    return index


def decode_index(index: int, counts: Sequence[int]) -> List[int]:
    # Integer index -> mixed-radix digits (most significant first).
    radices = _radices(counts)
    total = prod(radices)
    if not 0 <= index < total:
        raise IndexOutOfRange(index, total)
    digits = []
    for position in range(len(radices)):
        place = prod(radices[position + 1:])
        digit, index = divmod(index, place)
        digits.append(digit)
    return digits


def _classify(sections: Iterable[Section]) -> dict:
    by_type = {section_type: [] for section_type in CATEGORY_ORDER}
    for section in sections:
        by_type[section.section_type].append(section)
    return by_type


def _option(group: Optional[int], by_type: dict) -> EnrollmentOption:
    return EnrollmentOption(group, *(tuple(by_type[t]) for t in CATEGORY_ORDER))


def build_enrollment_options(sections: Sequence[Section]) -> List[EnrollmentOption]:
    """Partition a course's sections into mutually exclusive enrollment options.

    Each enrollment section yields one option keyed by its associated group.
    A satellite section joins option ``g`` when its group is ``g`` or when no
    enrollment section claims its group at all, in which case it is offered
    to every option. A course with sections but no enrollment section gets a
    single option holding everything; a course without sections gets none.
    """
    enrollment = [s for s in sections if s.is_enrollment]
    if not enrollment:
        return [_option(None, _classify(sections))] if sections else []

    claimed = {s.associated_group for s in enrollment}

    options = []
    for primary in enrollment:
        group = primary.associated_group
        members = [
            s for s in sections
            if s is primary or (
                not s.is_enrollment
                and (s.associated_group == group or s.associated_group not in claimed)
            )
        ]
        options.append(_option(group, _classify(members)))
    return options


def option_combinations(option: EnrollmentOption, start: int = 0) -> int:
    return prod(_radices(option.counts()[start:]))


def course_total_combinations(course: Course) -> int:
    # Options are alternatives, so their counts add up.
    return sum(option_combinations(o) for o in build_enrollment_options(course.sections))


def select_from_options(name: str, options: Sequence[EnrollmentOption], index: int) -> Course:
    total = sum(option_combinations(o) for o in options)
    if not 0 <= index < total:
        raise IndexOutOfRange(index, total)

    remaining = index
    for option in options:
        size = option_combinations(option)
        if remaining < size:
            digits = decode_index(remaining, option.counts())
            picked = [
                category[digit]
                for category, digit in zip(option.categories(), digits)
                if category
            ]
            return Course(name, picked)
        remaining -= size
    # Unreachable: the range check above covers every option.
    raise IndexOutOfRange(index, total)


def select_combination(course: Course, index: int) -> Course:
    """Return the projection of ``course`` addressed by ``index``.

    The projection keeps the course name and holds one section per non-empty
    category of the option that contains ``index``. Indices outside
    ``[0, course_total_combinations(course))`` raise :class:`IndexOutOfRange`.
    """
    return select_from_options(course.name, build_enrollment_options(course.sections), index)


def _digits_for(option: EnrollmentOption, chosen: List[Section]) -> Optional[List[int]]:
    remaining = list(chosen)
    digits = []
    for category in option.categories():
        if not category:
            digits.append(0)
            continue
        hits = [i for i, s in enumerate(category) if any(s is c for c in remaining)]
        if len(hits) != 1:
            return None
        digits.append(hits[0])
        hit = category[hits[0]]
        remaining = [c for c in remaining if c is not hit]
    return None if remaining else digits


def combination_index(course: Course, selection: Union[Course, Sequence[Section]]) -> int:
    # Inverse of select_combination.
    chosen = list(selection.sections if isinstance(selection, Course) else selection)
    offset = 0
    for option in build_enrollment_options(course.sections):
        digits = _digits_for(option, chosen)
        if digits is not None:
            return offset + encode_digits(digits, option.counts())
        offset += option_combinations(option)
    raise ValueError(f"selection is not a combination of {course.name}")
