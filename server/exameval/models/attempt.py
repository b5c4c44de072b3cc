from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from exameval.database import Base


class TestAttempt(Base):
    """A student's evaluated submission of a test"""
    __tablename__ = "test_attempts"
    __test__ = False

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    test_id = Column(Integer, ForeignKey("tests.id"), nullable=False)
    test_title = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    score = Column(Integer, nullable=False)  # 0-100
    evaluation = Column(JSON, default=dict)  # {question_id: {...}}
    time_spent = Column(Integer, default=0)  # Minutes
    is_assigned_test = Column(Boolean, default=False)
    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    test = relationship("Test", back_populates="attempts")
