"""
Request dependencies: authenticated user lookup and role guards.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from exameval.database import get_db
from exameval.errors import ErrorResponse
from exameval.evaluators.base import BaseEssayEvaluator, BaseFileEvaluator
from exameval.evaluators.factory import get_essay_evaluator, get_file_evaluator
from exameval.models import User, UserRole
from exameval.services.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    cookie = request.cookies.get("token")
    if cookie and cookie != "none":
        return cookie
    return None


def resolve_user(token: Optional[str], db: Session) -> User:
    """Map a bearer token to an active user or raise."""
    if not token:
        raise ErrorResponse("Not authorized to access this route", 401)

    payload = decode_access_token(token)
    if payload is None:
        raise ErrorResponse("Not authorized to access this route", 401)

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise ErrorResponse("Not authorized to access this route", 401)

    user = db.get(User, user_id)
    if user is None:
        raise ErrorResponse("User not found", 404)
    if not user.is_active:
        raise ErrorResponse("Account is deactivated", 401)
    return user


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    return resolve_user(_extract_token(request, credentials), db)


def require_role(*roles: UserRole):
    def role_dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ErrorResponse(f"User role {user.role.value} is not authorized to access this route", 403)
        return user
    return role_dep


require_teacher = require_role(UserRole.TEACHER)
require_student = require_role(UserRole.STUDENT)


def essay_evaluator() -> BaseEssayEvaluator:
    return get_essay_evaluator()


def file_evaluator() -> BaseFileEvaluator:
    return get_file_evaluator()
