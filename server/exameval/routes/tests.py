import logging
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from exameval.database import get_db
from exameval.dependencies import essay_evaluator, require_student, require_teacher
from exameval.errors import ErrorResponse
from exameval.evaluators.base import BaseEssayEvaluator, evaluate_test, is_unanswered
from exameval.models import Question, Section, Test, TestAttempt, User
from exameval.schemas import (
    AssignTestRequest,
    AttemptResponse,
    StudentStats,
    StudentTestResponse,
    SubmitTestRequest,
    TeacherStats,
    TestCreate,
    TestFilter,
    TestResponse,
)
from exameval.services.assignments import (
    ALL_STUDENTS,
    assigned_tests_for,
    completed_tests_for,
    history_for,
    is_visible_to,
    practice_tests,
)
from exameval.services.sse_manager import section_channel, sse_manager
from exameval.services.stats import compute_student_stats, compute_teacher_stats

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tests"])

PRACTICE_QUESTION_COUNT = 2
DEFAULT_DUE_DAYS = 7


def _student_view(test: Test, completed: dict, questions: Optional[List[Question]] = None) -> StudentTestResponse:
    view = StudentTestResponse.model_validate(test)
    update = {"is_completed": bool(test.is_assigned and completed.get(test.id, False))}
    if questions is not None:
        update["questions"] = [q for q in view.questions if q.id in {question.id for question in questions}]
    return view.model_copy(update=update)


def _get_owned_test(db: Session, test_id: int, teacher: User) -> Test:
    test = db.get(Test, test_id)
    if test is None or test.is_practice or test.created_by_id != teacher.id:
        raise ErrorResponse("Test not found", 404)
    return test


def _get_visible_test(db: Session, test_id: int, student: User) -> Test:
    test = db.get(Test, test_id)
    if test is None or not is_visible_to(test, student):
        raise ErrorResponse("Test not found", 404)
    return test


# =============================================================================
# Teacher
# =============================================================================

@router.post("", status_code=201)
async def create_test(
    request: TestCreate,
    user: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Teacher creates an essay test (unassigned)"""
    test = Test(
        title=request.title,
        subject=request.subject,
        description=request.description,
        duration=request.duration,
        total_marks=request.total_marks,
        difficulty=request.difficulty,
        is_assigned=False,
        assigned_to=[],
        created_by=user.name,
        created_by_id=user.id,
    )
    test.questions = [
        Question(position=i, text=q.text, marks=q.marks, word_limit=q.word_limit)
        for i, q in enumerate(request.questions)
    ]
    db.add(test)
    db.commit()
    db.refresh(test)

    logger.info("Teacher %s created test %s (%d questions)", user.id, test.id, len(test.questions))
    return {"success": True, "data": TestResponse.model_validate(test)}


@router.get("")
async def list_tests(user: User = Depends(require_teacher), db: Session = Depends(get_db)):
    tests = db.query(Test).filter(Test.created_by_id == user.id).order_by(Test.id).all()
    return {
        "success": True,
        "count": len(tests),
        "data": [TestResponse.model_validate(t) for t in tests],
    }


@router.get("/stats")
async def teacher_stats(user: User = Depends(require_teacher), db: Session = Depends(get_db)):
    tests = db.query(Test).filter(Test.created_by_id == user.id).all()
    return {"success": True, "data": TeacherStats(**compute_teacher_stats(tests))}


# =============================================================================
# Student
# =============================================================================

@router.get("/available")
async def available_tests(
    view: TestFilter = Query("all", alias="filter"),
    user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    """
    Tests on the student's dashboard: assigned tests first, then practice tests.
    assigned = still to do, completed = assigned and submitted.
    """
    completed = completed_tests_for(db, user)
    assigned = [_student_view(t, completed) for t in assigned_tests_for(db, user)]
    practice = [_student_view(t, completed) for t in practice_tests(db)]

    if view == "assigned":
        tests = [t for t in assigned if not t.is_completed]
    elif view == "completed":
        tests = [t for t in assigned if t.is_completed]
    elif view == "practice":
        tests = practice
    else:
        tests = assigned + practice

    return {"success": True, "count": len(tests), "data": tests}


@router.get("/history")
async def test_history(user: User = Depends(require_student), db: Session = Depends(get_db)):
    attempts = history_for(db, user)
    return {
        "success": True,
        "count": len(attempts),
        "data": [AttemptResponse.model_validate(a) for a in attempts],
    }


@router.get("/dashboard")
async def student_dashboard(user: User = Depends(require_student), db: Session = Depends(get_db)):
    stats = compute_student_stats(
        history_for(db, user),
        assigned_tests_for(db, user),
        completed_tests_for(db, user),
    )
    return {"success": True, "data": StudentStats(**stats)}


@router.get("/{test_id}/start")
async def start_test(test_id: int, user: User = Depends(require_student), db: Session = Depends(get_db)):
    """Assigned tests serve every question; practice tests a random two"""
    test = _get_visible_test(db, test_id, user)
    completed = completed_tests_for(db, user)

    if test.is_assigned and completed.get(test.id):
        raise ErrorResponse("You have already completed this assigned test.", 400)

    questions = list(test.questions)
    if test.is_practice:
        questions = random.sample(questions, min(PRACTICE_QUESTION_COUNT, len(questions)))

    return {
        "success": True,
        "data": _student_view(test, completed, questions),
        "started_at": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/{test_id}/submit", status_code=201)
async def submit_test(
    test_id: int,
    request: SubmitTestRequest,
    user: User = Depends(require_student),
    db: Session = Depends(get_db),
    evaluator: BaseEssayEvaluator = Depends(essay_evaluator),
):
    test = _get_visible_test(db, test_id, user)

    if test.is_assigned and completed_tests_for(db, user).get(test.id):
        raise ErrorResponse("You have already completed this assigned test.", 400)

    questions = list(test.questions)
    if request.question_ids and not test.is_assigned:
        by_id = {q.id: q for q in questions}
        unknown = [qid for qid in request.question_ids if qid not in by_id]
        if unknown:
            raise ErrorResponse(f"Unknown question id {unknown[0]} for this test", 400)
        questions = [by_id[qid] for qid in request.question_ids]

    if all(is_unanswered(request.answers.get(str(q.id))) for q in questions):
        raise ErrorResponse("Please answer at least one question before submitting.", 400)

    result = evaluate_test(questions, request.answers, evaluator)

    attempt = TestAttempt(
        student_id=user.id,
        test_id=test.id,
        test_title=test.title,
        subject=test.subject,
        score=result["score"],
        evaluation=result["evaluation"],
        time_spent=result["time_spent"],
        is_assigned_test=bool(test.is_assigned),
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    logger.info("Student %s scored %s on test %s", user.id, attempt.score, test.id)
    return {"success": True, "data": AttemptResponse.model_validate(attempt)}


# =============================================================================
# Teacher: single test
# =============================================================================

@router.get("/{test_id}")
async def get_test(test_id: int, user: User = Depends(require_teacher), db: Session = Depends(get_db)):
    return {"success": True, "data": TestResponse.model_validate(_get_owned_test(db, test_id, user))}


@router.post("/{test_id}/assign")
async def assign_test(
    test_id: int,
    request: AssignTestRequest,
    user: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Assign a test to one or more sections (added to any existing ones)"""
    test = _get_owned_test(db, test_id, user)

    requested = [name.strip() for name in request.sections if name.strip()]
    known = {name for (name,) in db.query(Section.name).filter(Section.name.in_(requested)).all()}
    for name in requested:
        if name != ALL_STUDENTS and name not in known:
            raise ErrorResponse(f"Section {name} not found", 404)

    merged = list(test.assigned_to or [])
    for name in requested:
        if name not in merged:
            merged.append(name)

    now = datetime.now(timezone.utc)
    test.assigned_to = merged
    test.is_assigned = True
    test.assigned_date = now
    test.due_date = request.due_date or now + timedelta(days=DEFAULT_DUE_DAYS)
    db.commit()
    db.refresh(test)

    for name in requested:
        await sse_manager.broadcast(section_channel(name), {
            "type": "test_assigned",
            "data": {"test_id": test.id, "title": test.title, "section": name},
        })

    logger.info("Test %s assigned to %s", test.id, ", ".join(requested))
    return {"success": True, "data": TestResponse.model_validate(test)}


@router.delete("/{test_id}")
async def delete_test(test_id: int, user: User = Depends(require_teacher), db: Session = Depends(get_db)):
    test = _get_owned_test(db, test_id, user)
    db.delete(test)
    db.commit()
    return {"success": True, "message": "Test deleted"}
