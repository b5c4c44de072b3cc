"""
Which tests a student sees, and which of them they have completed.
"""
from typing import Dict, List

from sqlalchemy.orm import Session

from exameval.models import Test, TestAttempt, User

ALL_STUDENTS = "All Students"


def is_visible_to(test: Test, student: User) -> bool:
    if test.is_practice:
        return True
    if not test.is_assigned:
        return False
    sections = test.assigned_to or []
    return ALL_STUDENTS in sections or (student.section is not None and student.section in sections)


def assigned_tests_for(db: Session, student: User) -> List[Test]:
    tests = (
        db.query(Test)
        .filter(Test.is_assigned.is_(True), Test.is_practice.is_(False))
        .order_by(Test.id.desc())
        .all()
    )
    return [test for test in tests if is_visible_to(test, student)]


def practice_tests(db: Session) -> List[Test]:
    return db.query(Test).filter(Test.is_practice.is_(True)).order_by(Test.id).all()


def completed_tests_for(db: Session, student: User) -> Dict[int, bool]:
    """Assigned test id -> True for every assigned test the student has submitted."""
    rows = (
        db.query(TestAttempt.test_id)
        .filter(TestAttempt.student_id == student.id, TestAttempt.is_assigned_test.is_(True))
        .distinct()
        .all()
    )
    return {test_id: True for (test_id,) in rows}


def history_for(db: Session, student: User) -> List[TestAttempt]:
    return (
        db.query(TestAttempt)
        .filter(TestAttempt.student_id == student.id)
        .order_by(TestAttempt.id.desc())
        .all()
    )
