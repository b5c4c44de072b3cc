"""
Default sections and the built-in practice tests.
"""
import logging

from sqlalchemy.orm import Session

from exameval.models import Question, Section, Test

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS = [
    ("10A", 28),
    ("10B", 31),
    ("11A", 25),
    ("11B", 29),
    ("12A", 22),
    ("12B", 21),
]

PRACTICE_TESTS = [
    {
        "title": "Algorithm Fundamentals",
        "subject": "Algorithms",
        "description": "Practice core concepts in algorithm design and analysis.",
        "difficulty": "Medium",
        "duration": 30,
        "questions": [
            ("Explain the concept of time complexity in algorithms with an example.", 200),
            ("Describe how a binary search algorithm works and its advantages.", 150),
        ],
    },
    {
        "title": "Data Structures Basics",
        "subject": "Data Structures",
        "description": "Explore fundamental data structures and their applications.",
        "difficulty": "Easy",
        "duration": 25,
        "questions": [
            ("Describe the differences between arrays and linked lists.", 150),
            ("Explain how a binary tree is used in real-world applications.", 200),
        ],
    },
    {
        "title": "Calculus Basics",
        "subject": "Mathematics",
        "description": "Test your understanding of derivatives and integrals.",
        "difficulty": "Hard",
        "duration": 45,
        "questions": [
            ("Explain the fundamental theorem of calculus and its significance.", 250),
            ("Describe the difference between definite and indefinite integrals.", 150),
        ],
    },
]


def seed_defaults(db: Session) -> None:
    """Insert missing default sections and practice tests. Safe to rerun."""
    existing_sections = {name for (name,) in db.query(Section.name).all()}
    for name, student_count in DEFAULT_SECTIONS:
        if name not in existing_sections:
            db.add(Section(name=name, student_count=student_count))

    existing_practice = {title for (title,) in db.query(Test.title).filter(Test.is_practice.is_(True)).all()}
    for practice in PRACTICE_TESTS:
        if practice["title"] in existing_practice:
            continue
        test = Test(
            title=practice["title"],
            subject=practice["subject"],
            description=practice["description"],
            difficulty=practice["difficulty"],
            duration=practice["duration"],
            total_marks=100 * len(practice["questions"]),
            is_practice=True,
            assigned_to=[],
            created_by="ExamEval",
        )
        test.questions = [
            Question(position=i, text=text, marks=100, word_limit=word_limit)
            for i, (text, word_limit) in enumerate(practice["questions"])
        ]
        db.add(test)
        logger.info("Seeded practice test %s", practice["title"])

    db.commit()
