from itertools import product

import pytest

from catalog_models import SectionType
from combination_indexer import (
    IndexOutOfRange,
    build_enrollment_options,
    combination_index,
    course_total_combinations,
    decode_index,
    encode_digits,
    option_combinations,
    select_combination,
)
from tests.factories import course, names, occurrence, section

LEC, LAB, TUT, SEM, OPL, OLC = (
    SectionType.LECTURE,
    SectionType.LAB,
    SectionType.TUTORIAL,
    SectionType.SEMINAR,
    SectionType.OPEN_LAB,
    SectionType.ONLINE,
)


def cmpt_120():
    # One enrollment lecture for group 1, two labs tied to it and two labs in
    # group 2, which no enrollment section claims.
    return course(
        "CMPT 120",
        section("D100", LEC, occurrence("Mo We"), group=1, enrollment=True),
        section("D101", LAB, occurrence("Tu", "09:00", "10:00"), group=1),
        section("D102", LAB, occurrence("Tu", "10:00", "11:00"), group=1),
        section("D201", LAB, occurrence("Th", "09:00", "10:00"), group=2),
        section("D202", LAB, occurrence("Th", "10:00", "11:00"), group=2),
    )


def test_digits_round_trip_and_cover_every_index():
    counts = [2, 0, 3, 1, 0, 2]
    seen = set()
    for index in range(12):
        digits = decode_index(index, counts)
        assert encode_digits(digits, counts) == index
        seen.add(tuple(digits))
    assert len(seen) == 12


def test_decode_is_most_significant_first():
    assert decode_index(0, [2, 3]) == [0, 0]
    assert decode_index(1, [2, 3]) == [0, 1]
    assert decode_index(3, [2, 3]) == [1, 0]
    assert decode_index(5, [2, 3]) == [1, 2]


def test_empty_radix_contributes_a_fixed_zero_digit():
    assert decode_index(2, [0, 3, 0]) == [0, 2, 0]


@pytest.mark.parametrize("index", [-1, 6])
def test_decode_rejects_indices_outside_the_range(index):
    with pytest.raises(IndexOutOfRange):
        decode_index(index, [2, 3])


def test_encode_rejects_digit_beyond_radix():
    with pytest.raises(ValueError):
        encode_digits([0, 3], [2, 3])


def test_option_count_is_product_of_non_empty_category_sizes():
    sections = [
        section("D100", LEC, enrollment=True, group=1),
        section("D101", LAB, group=1),
        section("D102", LAB, group=1),
        section("D103", TUT, group=1),
        section("D104", TUT, group=1),
        section("D105", TUT, group=1),
        section("D106", OPL, group=1),
    ]
    [option] = build_enrollment_options(sections)

    assert option.counts() == [1, 2, 3, 0, 1, 0]
    assert option_combinations(option) == 1 * 2 * 3 * 1 * 1 * 1
    assert option_combinations(option, 2) == 3
    assert option_combinations(option, 6) == 1


def test_open_satellites_join_the_enrollment_option():
    cmpt = cmpt_120()
    [option] = build_enrollment_options(cmpt.sections)

    assert option.group == 1
    assert [s.name for s in option.labs] == ["D101", "D102", "D201", "D202"]
    assert course_total_combinations(cmpt) == 4


def test_index_zero_picks_the_lecture_and_first_lab():
    assert names(select_combination(cmpt_120(), 0)) == ["D100", "D101"]
    assert names(select_combination(cmpt_120(), 3)) == ["D100", "D202"]


def test_open_satellites_are_offered_to_every_option():
    sections = [
        section("D100", LEC, group=1, enrollment=True),
        section("D200", LEC, group=2, enrollment=True),
        section("D101", TUT, group=1),
        section("D102", TUT, group=1),
        section("D201", TUT, group=2),
        section("D901", TUT, group=9),
    ]
    options = build_enrollment_options(sections)

    assert [o.group for o in options] == [1, 2]
    assert [[s.name for s in o.tutorials] for o in options] == [
        ["D101", "D102", "D901"],
        ["D201", "D901"],
    ]
    # The open tutorial is counted once per option.
    assert course_total_combinations(course("X 1", *sections)) == 3 + 2


def test_each_option_holds_exactly_one_enrollment_section():
    sections = [
        section("D100", LEC, group=1, enrollment=True),
        section("D101", LEC, group=1, enrollment=True),
        section("D102", LAB, group=1),
    ]
    options = build_enrollment_options(sections)

    assert [[s.name for s in o.lectures] for o in options] == [["D100"], ["D101"]]
    assert all([s.name for s in o.labs] == ["D102"] for o in options)


def test_course_without_enrollment_sections_uses_one_implicit_option():
    sections = [
        section("L1", LEC),
        section("L2", LEC),
        section("T1", TUT, group=4),
        section("T2", TUT, group=5),
        section("T3", TUT, group=6),
    ]
    [option] = build_enrollment_options(sections)

    assert option.group is None
    assert course_total_combinations(course("X 1", *sections)) == 6


def test_second_option_starts_after_the_first():
    sections = [
        section("D100", LEC, group=1, enrollment=True),
        section("D200", OLC, group=2, enrollment=True),
        section("D101", LAB, group=1),
        section("D102", LAB, group=1),
    ]
    mixed = course("X 1", *sections)

    assert course_total_combinations(mixed) == 2 + 1
    assert names(select_combination(mixed, 1)) == ["D100", "D102"]
    assert names(select_combination(mixed, 2)) == ["D200"]


def test_least_significant_category_turns_fastest():
    c = course(
        "X 1",
        section("L1", LEC),
        section("L2", LEC),
        section("B1", LAB),
        section("B2", LAB),
        section("B3", LAB),
    )
    assert names(select_combination(c, 1)) == ["L1", "B2"]
    assert names(select_combination(c, 3)) == ["L2", "B1"]


def test_empty_categories_are_omitted_from_the_projection():
    c = course("X 1", section("D100", LEC, enrollment=True, group=1))
    projection = select_combination(c, 0)

    assert projection.name == "X 1"
    assert names(projection) == ["D100"]


def test_selection_is_injective_and_round_trips():
    sections = [
        section("D100", LEC, group=1, enrollment=True),
        section("D200", LEC, group=2, enrollment=True),
        section("D101", LAB, group=1),
        section("D102", LAB, group=1),
        section("D201", LAB, group=2),
        section("D103", TUT, group=1),
        section("D104", TUT, group=1),
        section("D901", SEM, group=9),
        section("D902", SEM, group=9),
    ]
    c = course("X 1", *sections)
    total = course_total_combinations(c)
    assert total == 1 * 2 * 2 * 2 + 1 * 1 * 1 * 2

    selections = [select_combination(c, i) for i in range(total)]
    assert len({tuple(names(s)) for s in selections}) == total
    for index, projection in enumerate(selections):
        assert combination_index(c, projection) == index


def test_every_pick_of_one_option_is_reachable():
    c = course(
        "X 1",
        section("L1", LEC),
        section("L2", LEC),
        section("S1", SEM),
        section("S2", SEM),
        section("S3", SEM),
    )
    expected = {(lec, sem) for lec, sem in product(["L1", "L2"], ["S1", "S2", "S3"])}
    reached = {tuple(names(select_combination(c, i))) for i in range(6)}
    assert reached == expected


def test_combination_index_rejects_foreign_selection():
    with pytest.raises(ValueError):
        combination_index(cmpt_120(), [section("D999", LAB)])


@pytest.mark.parametrize("index", [-1, 4, 100])
def test_select_combination_out_of_range(index):
    with pytest.raises(IndexOutOfRange) as excinfo:
        select_combination(cmpt_120(), index)
    assert excinfo.value.total == 4


def test_empty_course_has_no_combinations():
    empty = course("EMPTY 100")
    assert build_enrollment_options(empty.sections) == []
    assert course_total_combinations(empty) == 0
    with pytest.raises(IndexOutOfRange):
        select_combination(empty, 0)


def test_selection_returns_a_new_course():
    cmpt = cmpt_120()
    before = cmpt.sections

    projection = select_combination(cmpt, 2)

    assert projection is not cmpt
    assert cmpt.sections == before
    assert projection.sections[0] is cmpt.sections[0]
