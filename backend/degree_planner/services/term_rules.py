"""
Semester term sequencing rules
"""
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import ValidationError
from ..models.plan import PlanSemester, Term

NEXT_TERMS: Dict[Term, Tuple[Term, ...]] = {
    Term.FALL: (Term.WINTER, Term.SPRING),
    Term.SPRING: (Term.SUMMER, Term.FALL),
    Term.WINTER: (Term.SPRING,),
    Term.SUMMER: (Term.FALL,),
}


def valid_next_terms(current: Term) -> List[Term]:
    """Terms allowed to follow ``current``"""
    return list(NEXT_TERMS.get(Term(current), ()))


def ensure_can_open_semester(
    semesters: Sequence[PlanSemester], nth_semestre: int, term: Term
) -> Optional[PlanSemester]:
    """
    Check that a semester at position ``nth_semestre`` may be opened.

    Each position may be opened once. The first semester may use any term.
    Later ones need the previous position to exist, to hold at least one
    planned course, and to allow ``term`` as its successor. Returns the
    previous semester, if any.
    """
    if nth_semestre < 1:
        raise ValidationError("nth_semestre must be 1 or greater")
    if any(s.nth_semestre == nth_semestre for s in semesters):
        raise ValidationError(
            f"Semester {nth_semestre} already exists in this plan.",
            details={"nth_semestre": nth_semestre},
        )
    if nth_semestre == 1:
        return None

    previous = next((s for s in semesters if s.nth_semestre == nth_semestre - 1), None)
    if previous is None:
        raise ValidationError(
            f"Cannot create semester {nth_semestre}. Previous semester does not exist."
        )

    if not previous.planned_courses:
        raise ValidationError(
            "Cannot create a new semester. The previous semester is empty.",
            details={"previous_semester_id": previous.id},
        )

    allowed = valid_next_terms(previous.term)
    if Term(term) not in allowed:
        names = " or ".join(t.value for t in allowed)
        raise ValidationError(
            f"Invalid term sequence. After {previous.term.value}, "
            f"you can only select: {names}",
            details={"allowed_terms": [t.value for t in allowed]},
        )
    return previous
