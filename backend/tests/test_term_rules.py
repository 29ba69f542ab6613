"""
Tests for semester term sequencing
"""
import pytest

from degree_planner.core.exceptions import ValidationError
from degree_planner.models.plan import PlanSemester, PlannedCourse, Term
from degree_planner.services.term_rules import ensure_can_open_semester, valid_next_terms


def make_semester(nth, term, codes=("MAT1001",)):
    semester_id = f"sem-{nth}"
    return PlanSemester(
        id=semester_id,
        degree_plan_id="plan-1",
        year=2024,
        term=term,
        nth_semestre=nth,
        planned_courses=[
            PlannedCourse(id=f"pc-{nth}-{code}", plan_semester_id=semester_id, course_code=code)
            for code in codes
        ],
    )


@pytest.mark.parametrize(
    "current, allowed",
    [
        (Term.FALL, [Term.WINTER, Term.SPRING]),
        (Term.SPRING, [Term.SUMMER, Term.FALL]),
        (Term.WINTER, [Term.SPRING]),
        (Term.SUMMER, [Term.FALL]),
    ],
)
def test_valid_next_terms(current, allowed):
    assert valid_next_terms(current) == allowed


def test_valid_next_terms_accepts_string_value():
    assert valid_next_terms("WINTER") == [Term.SPRING]


def test_first_semester_accepts_any_term():
    for term in Term:
        assert ensure_can_open_semester([], 1, term) is None


def test_nth_below_one_rejected():
    with pytest.raises(ValidationError):
        ensure_can_open_semester([], 0, Term.FALL)


def test_previous_semester_must_exist():
    with pytest.raises(ValidationError, match="Previous semester does not exist"):
        ensure_can_open_semester([make_semester(1, Term.FALL)], 3, Term.SPRING)


def test_previous_semester_must_not_be_empty():
    empty = make_semester(1, Term.FALL, codes=())
    with pytest.raises(ValidationError, match="The previous semester is empty"):
        ensure_can_open_semester([empty], 2, Term.SPRING)


def test_invalid_term_names_allowed_terms():
    with pytest.raises(ValidationError) as exc_info:
        ensure_can_open_semester([make_semester(1, Term.FALL)], 2, Term.SUMMER)

    assert (
        exc_info.value.message
        == "Invalid term sequence. After FALL, you can only select: WINTER or SPRING"
    )
    assert exc_info.value.details["allowed_terms"] == ["WINTER", "SPRING"]


def test_valid_transition_returns_previous():
    first = make_semester(1, Term.SPRING)
    assert ensure_can_open_semester([first], 2, Term.SUMMER) is first


@pytest.mark.parametrize("nth", [1, 2])
def test_taken_position_rejected(nth):
    semesters = [make_semester(1, Term.FALL), make_semester(2, Term.SPRING)]
    with pytest.raises(ValidationError, match=f"Semester {nth} already exists") as exc_info:
        ensure_can_open_semester(semesters, nth, Term.FALL)
    assert exc_info.value.details == {"nth_semestre": nth}


@pytest.mark.parametrize("previous_term", list(Term))
def test_empty_previous_semester_rejected_for_every_term(previous_term):
    empty = make_semester(1, previous_term, codes=())
    for term in valid_next_terms(previous_term):
        with pytest.raises(ValidationError, match="The previous semester is empty"):
            ensure_can_open_semester([empty], 2, term)
