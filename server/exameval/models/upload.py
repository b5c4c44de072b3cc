from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from exameval.database import Base
from exameval.models.user import UserRole
import enum


class UploadType(str, enum.Enum):
    QUESTION = "question"
    ANSWER = "answer"


class UploadStatus(str, enum.Enum):
    ANALYZING = "analyzing"
    EVALUATED = "evaluated"


class Upload(Base):
    """A batch of files submitted for evaluation"""
    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True, index=True)
    student_info = Column(JSON, default=dict)  # {name, class, subject}
    files = Column(JSON, default=list)  # [{id, name, type, size, upload_type}]
    result = Column(JSON, nullable=True)
    status = Column(SQLEnum(UploadStatus), default=UploadStatus.ANALYZING)

    uploaded_by = Column(String, nullable=False)  # Uploader email
    uploaded_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    uploaded_by_role = Column(SQLEnum(UserRole), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    blobs = relationship("FileBlob", back_populates="upload", cascade="all, delete-orphan")


class FileBlob(Base):
    """Raw file content stored base64 encoded"""
    __tablename__ = "file_blobs"

    id = Column(String, primary_key=True, index=True)  # file_<ms>_<i>_<rand>
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=False)
    name = Column(String, nullable=False)
    content_type = Column(String, nullable=True)
    size = Column(Integer, default=0)
    data = Column(Text, nullable=False)  # Base64
    upload_type = Column(SQLEnum(UploadType), nullable=False)
    uploaded_by = Column(String, nullable=False)
    student_name = Column(String, nullable=True)
    student_class = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    upload = relationship("Upload", back_populates="blobs")
