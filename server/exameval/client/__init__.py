from exameval.client.api import ApiClient, ApiError
from exameval.client.dashboard import StudentDashboard, TeacherDashboard
from exameval.client.session import AuthError, SessionStore
from exameval.client.storage import LocalStorage
from exameval.client.uploads import UploadStore

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthError",
    "LocalStorage",
    "SessionStore",
    "StudentDashboard",
    "TeacherDashboard",
    "UploadStore",
]
