from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal, Any
from datetime import datetime
from exameval.models.user import UserRole
from exameval.models.upload import UploadType, UploadStatus


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

Difficulty = Literal["Easy", "Medium", "Hard"]
TestFilter = Literal["all", "assigned", "completed", "practice"]


# User Schemas
class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    institution: Optional[str] = None
    bio: Optional[str] = None
    section: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)
    role: UserRole = UserRole.STUDENT
    phone: Optional[str] = None
    institution: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    section: Optional[str] = None


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UpdateProfileRequest(BaseModel):
    """Partial profile update: absent or null fields are left untouched."""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    institution: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    section: Optional[str] = None


class UpdatePasswordRequest(BaseModel):
    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword", min_length=6)

    class Config:
        populate_by_name = True


class ForgotPasswordRequest(BaseModel):
    email: str = Field(min_length=1)


class AuthResponse(BaseModel):
    success: bool = True
    data: UserResponse
    token: str


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# Section Schemas
class SectionCreate(BaseModel):
    name: str = Field(min_length=1)
    student_count: int = Field(ge=0, default=0)


class SectionResponse(SectionCreate):
    id: int

    class Config:
        from_attributes = True


# Test Schemas
class QuestionCreate(BaseModel):
    text: str = Field(min_length=1)
    marks: int = Field(ge=1, default=25)
    word_limit: int = Field(ge=1, default=200)


class QuestionResponse(BaseModel):
    id: int
    text: str
    type: str = "essay"
    marks: int
    word_limit: int

    class Config:
        from_attributes = True


class TestCreate(BaseModel):
    title: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    description: Optional[str] = None
    duration: int = Field(ge=1, default=60)
    total_marks: int = Field(ge=1, default=100)
    difficulty: Difficulty = "Medium"
    questions: List[QuestionCreate] = Field(min_length=1)


class TestResponse(BaseModel):
    id: int
    title: str
    subject: str
    description: Optional[str] = None
    duration: int
    total_marks: int
    difficulty: str
    is_practice: bool = False
    is_assigned: bool = False
    assigned_to: List[str] = []
    assigned_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    questions: List[QuestionResponse] = []

    class Config:
        from_attributes = True


class StudentTestResponse(TestResponse):
    """A test as seen from a student's dashboard."""
    is_completed: bool = False


class AssignTestRequest(BaseModel):
    sections: List[str] = Field(min_length=1)
    due_date: Optional[datetime] = None


class SubmitTestRequest(BaseModel):
    answers: Dict[str, str]  # question_id -> answer text
    question_ids: Optional[List[int]] = None  # Questions served by /start


class QuestionEvaluation(BaseModel):
    score: int
    max_score: int
    feedback: str
    strengths: List[str] = []
    improvements: List[str] = []


class AttemptResponse(BaseModel):
    id: int
    test_id: int
    test_title: str
    subject: str
    score: int
    evaluation: Dict[str, QuestionEvaluation]
    time_spent: int
    is_assigned_test: bool
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StudentStats(BaseModel):
    total_tests_taken: int = 0
    average_score: int = 0
    best_subject: str = "None"
    completed_assigned_tests: int = 0
    pending_tests: int = 0


class TeacherStats(BaseModel):
    total_tests_created: int = 0
    tests_assigned: int = 0


# Upload Schemas
class UploadedFile(BaseModel):
    id: str
    name: str
    type: Optional[str] = None
    size: int
    upload_type: UploadType


class UploadResult(BaseModel):
    total_marks: int
    max_marks: int
    grade: str
    feedback: str
    strengths: List[str] = []
    improvements: List[str] = []
    student_name: Optional[str] = None
    student_class: Optional[str] = None
    subject: Optional[str] = None


class UploadResponse(BaseModel):
    id: int
    student_info: Dict[str, Any] = {}
    files: List[UploadedFile] = []
    result: Optional[UploadResult] = None
    status: UploadStatus
    uploaded_by: str
    uploaded_by_role: UserRole
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FileBlobResponse(BaseModel):
    id: str
    name: str
    content_type: Optional[str] = None
    size: int
    data: str
    upload_type: UploadType
    uploaded_by: str
    student_name: Optional[str] = None
    student_class: Optional[str] = None
    subject: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
