"""
Dashboard statistics, always derived fresh from their inputs.
"""
from typing import Any, Dict, Iterable, List, Mapping

from exameval.evaluators.base import round_half_up


def _field(item: Any, name: str):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def best_subject(history: List[Any]) -> str:
    """
    Subject with the highest average score. Ties keep the subject seen
    first; a best average of 0 reports "None".
    """
    subject_scores: Dict[str, Dict[str, int]] = {}
    for attempt in history:
        entry = subject_scores.setdefault(_field(attempt, "subject"), {"total": 0, "count": 0})
        entry["total"] += _field(attempt, "score")
        entry["count"] += 1

    best, best_average = "None", 0
    for subject, data in subject_scores.items():
        average = data["total"] / data["count"]
        if average > best_average:
            best, best_average = subject, average
    return best


def compute_student_stats(
    history: Iterable[Any],
    assigned_tests: Iterable[Any],
    completed_tests: Mapping[Any, bool],
) -> Dict[str, Any]:
    """
    Args:
        history: attempts with ``subject`` and ``score``
        assigned_tests: tests with an ``id`` assigned to the student
        completed_tests: test id -> completion flag
    """
    history = list(history)
    assigned = list(assigned_tests)

    total_tests = len(history)
    total_score = sum(_field(attempt, "score") for attempt in history)
    average_score = round_half_up(total_score / total_tests) if total_tests > 0 else 0

    completed_assigned = sum(1 for test in assigned if completed_tests.get(_field(test, "id"), False))

    return {
        "total_tests_taken": total_tests,
        "average_score": average_score,
        "best_subject": best_subject(history),
        "completed_assigned_tests": completed_assigned,
        "pending_tests": len(assigned) - completed_assigned,
    }


def compute_teacher_stats(tests: Iterable[Any]) -> Dict[str, int]:
    tests = list(tests)
    return {
        "total_tests_created": len(tests),
        "tests_assigned": sum(1 for test in tests if _field(test, "is_assigned")),
    }
