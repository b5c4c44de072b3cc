from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from exameval.database import Base


class Section(Base):
    """A named group of students tests can be assigned to"""
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    student_count = Column(Integer, default=0)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Test(Base):
    """Essay tests authored by teachers, or built-in practice tests"""
    __tablename__ = "tests"
    __test__ = False

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, default=60)  # Minutes
    total_marks = Column(Integer, default=100)
    difficulty = Column(String, default="Medium")

    is_practice = Column(Boolean, default=False)
    is_assigned = Column(Boolean, default=False)
    assigned_to = Column(JSON, default=list)  # Section names
    assigned_date = Column(DateTime(timezone=True), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)

    created_by = Column(String, nullable=True)  # Teacher display name
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    questions = relationship(
        "Question",
        back_populates="test",
        order_by="Question.position",
        cascade="all, delete-orphan",
    )
    attempts = relationship("TestAttempt", back_populates="test", cascade="all, delete-orphan")


class Question(Base):
    """Essay question owned by a single test"""
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False)
    position = Column(Integer, default=0)
    text = Column(Text, nullable=False)
    type = Column(String, default="essay")
    marks = Column(Integer, default=25)  # Max score
    word_limit = Column(Integer, default=200)

    # Relationships
    test = relationship("Test", back_populates="questions")
