"""
Student and teacher dashboards: fetch from the API, recompute stats on
every refresh.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from exameval.client.api import ApiClient
from exameval.services.stats import compute_student_stats, compute_teacher_stats

logger = logging.getLogger(__name__)


class StudentDashboard:
    def __init__(self, api: ApiClient):
        self.api = api
        self.tests: List[Dict[str, Any]] = []
        self.history: List[Dict[str, Any]] = []
        self.stats: Dict[str, Any] = compute_student_stats([], [], {})

    @property
    def assigned_tests(self) -> List[Dict[str, Any]]:
        return [t for t in self.tests if t.get("is_assigned") and not t.get("is_practice")]

    @property
    def practice_tests(self) -> List[Dict[str, Any]]:
        return [t for t in self.tests if t.get("is_practice")]

    def refresh(self) -> Dict[str, Any]:
        self.tests = self.api.get("/tests/available", params={"filter": "all"})["data"]
        self.history = self.api.get("/tests/history")["data"]

        assigned = self.assigned_tests
        completed = {t["id"]: bool(t.get("is_completed")) for t in assigned}
        self.stats = compute_student_stats(self.history, assigned, completed)
        return self.stats

    def filtered(self, view: str = "all") -> List[Dict[str, Any]]:
        if view == "assigned":
            return [t for t in self.assigned_tests if not t.get("is_completed")]
        if view == "completed":
            return [t for t in self.assigned_tests if t.get("is_completed")]
        if view == "practice":
            return self.practice_tests
        return self.assigned_tests + self.practice_tests

    def start_test(self, test_id: int) -> Dict[str, Any]:
        return self.api.get(f"/tests/{test_id}/start")["data"]

    def submit_test(self, test_id: int, answers: Dict[Any, str], question_ids: Optional[List[int]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"answers": {str(k): v for k, v in answers.items()}}
        if question_ids is not None:
            payload["question_ids"] = question_ids
        attempt = self.api.post(f"/tests/{test_id}/submit", json=payload)["data"]
        logger.info("Submitted test %s: score %s", test_id, attempt["score"])
        self.refresh()
        return attempt

    def upload_files(
        self,
        files: Iterable[Tuple[str, bytes, Optional[str]]],
        student_info: Dict[str, str],
        upload_type: str = "answer",
    ) -> Dict[str, Any]:
        """Send files to the server for evaluation; the result arrives later."""
        return _post_upload(self.api, files, student_info, upload_type)

    def uploads(self) -> List[Dict[str, Any]]:
        return self.api.get("/uploads")["data"]


class TeacherDashboard:
    def __init__(self, api: ApiClient):
        self.api = api
        self.tests: List[Dict[str, Any]] = []
        self.sections: List[Dict[str, Any]] = []
        self.stats: Dict[str, int] = compute_teacher_stats([])

    def refresh(self) -> Dict[str, int]:
        self.tests = self.api.get("/tests")["data"]
        self.sections = self.api.get("/sections")["data"]
        self.stats = compute_teacher_stats(self.tests)
        return self.stats

    def create_test(self, **test) -> Dict[str, Any]:
        created = self.api.post("/tests", json=test)["data"]
        self.refresh()
        return created

    def assign_test(self, test_id: int, sections: List[str], due_date: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"sections": sections}
        if due_date:
            payload["due_date"] = due_date
        assigned = self.api.post(f"/tests/{test_id}/assign", json=payload)["data"]
        self.refresh()
        return assigned

    def delete_test(self, test_id: int) -> None:
        self.api.delete(f"/tests/{test_id}")
        self.refresh()

    def create_section(self, name: str, student_count: int = 0) -> Dict[str, Any]:
        section = self.api.post("/sections", json={"name": name, "student_count": student_count})["data"]
        self.refresh()
        return section

    def upload_files(
        self,
        files: Iterable[Tuple[str, bytes, Optional[str]]],
        student_info: Dict[str, str],
        upload_type: str = "question",
    ) -> Dict[str, Any]:
        return _post_upload(self.api, files, student_info, upload_type)

    def uploads(self) -> List[Dict[str, Any]]:
        return self.api.get("/uploads")["data"]


def _post_upload(api: ApiClient, files, student_info: Dict[str, str], upload_type: str) -> Dict[str, Any]:
    multipart = [
        ("files", (name, content, content_type or "application/octet-stream"))
        for name, content, content_type in files
    ]
    form = {
        "upload_type": upload_type,
        "student_name": student_info.get("name", ""),
        "student_class": student_info.get("class", ""),
        "subject": student_info.get("subject", ""),
    }
    return api.post("/uploads", data=form, files=multipart)["data"]
