"""
Models package initialization
Import all models here to ensure they are registered with SQLAlchemy
"""

from exameval.models.user import User, UserRole
from exameval.models.content import Section, Test, Question
from exameval.models.attempt import TestAttempt
from exameval.models.upload import Upload, FileBlob, UploadType, UploadStatus

__all__ = [
    "User",
    "UserRole",
    "Section",
    "Test",
    "Question",
    "TestAttempt",
    "Upload",
    "FileBlob",
    "UploadType",
    "UploadStatus",
]
