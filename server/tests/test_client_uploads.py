"""
Test: client upload store and dashboards.
"""
import json
import random

import pytest
from conftest import API

import exameval.client.uploads as uploads_module
from exameval.client.api import ApiClient
from exameval.client.dashboard import StudentDashboard, TeacherDashboard
from exameval.client.session import SessionStore
from exameval.client.storage import LocalStorage
from exameval.client.uploads import (
    FILE_STORAGE_KEY,
    STUDENT_UPLOADS_KEY,
    TEACHER_UPLOADS_KEY,
    UploadStore,
)

INFO = {"name": "Sam", "class": "10A", "subject": "Physics"}


@pytest.fixture
def storage():
    return LocalStorage(":memory:")


@pytest.fixture
def store(storage):
    return UploadStore(storage, rng=random.Random(0))


class TestUploadCollections:
    def test_add_upload_prepends_with_unique_ids(self, store, storage):
        first = store.add_upload({"studentInfo": INFO})
        second = store.add_upload({"studentInfo": INFO})

        assert store.uploads[0] is second
        assert first["id"] != second["id"]
        assert second["createdAt"]
        assert [u["id"] for u in json.loads(storage.get_item(STUDENT_UPLOADS_KEY))] == [second["id"], first["id"]]

    def test_ids_bumped_within_same_millisecond(self, store, monkeypatch):
        monkeypatch.setattr(uploads_module, "now_ms", lambda: 1_700_000_000_000)
        ids = [store.add_upload({})["id"] for _ in range(3)]
        assert ids == [1_700_000_000_000, 1_700_000_000_001, 1_700_000_000_002]

    def test_reloaded_store_does_not_reuse_ids(self, store, storage, monkeypatch):
        monkeypatch.setattr(uploads_module, "now_ms", lambda: 1000)
        prior = [store.add_upload({})["id"] for _ in range(3)]
        store.add_teacher_upload({})

        reloaded = UploadStore(storage)
        new_id = reloaded.add_upload({})["id"]
        assert new_id not in prior
        assert new_id == 1004

    def test_clock_going_backwards_after_reload(self, store, storage, monkeypatch):
        monkeypatch.setattr(uploads_module, "now_ms", lambda: 5000)
        first = store.add_upload({})["id"]

        monkeypatch.setattr(uploads_module, "now_ms", lambda: 10)
        assert UploadStore(storage).add_upload({})["id"] > first

    def test_teacher_uploads_are_separate(self, store, storage):
        store.add_teacher_upload({"studentInfo": INFO})
        assert store.uploads == []
        assert len(json.loads(storage.get_item(TEACHER_UPLOADS_KEY))) == 1

    def test_delete_upload_keeps_blobs(self, store):
        upload = store.record_upload([("a.txt", b"abc", "text/plain")], INFO)
        file_id = upload["files"][0]["id"]

        store.delete_upload(upload["id"])
        assert store.uploads == []
        assert store.get_file(file_id) is not None

    def test_delete_teacher_upload(self, store):
        upload = store.add_teacher_upload({})
        store.delete_teacher_upload(upload["id"])
        assert store.teacher_uploads == []

    def test_reload_from_storage(self, store, storage):
        upload = store.add_upload({"studentInfo": INFO})
        store.store_file("file_1", {"id": "file_1"})

        reloaded = UploadStore(storage)
        assert reloaded.uploads == [upload]
        assert reloaded.get_file("file_1") == {"id": "file_1"}

    def test_malformed_storage_is_ignored(self, storage):
        storage.set_item(STUDENT_UPLOADS_KEY, "{broken")
        storage.set_item(FILE_STORAGE_KEY, "[]")
        store = UploadStore(storage)
        assert store.uploads == []
        assert store.file_storage == {}


class TestBlobs:
    def test_store_and_overwrite(self, store):
        store.store_file("f", {"v": 1})
        store.store_file("f", {"v": 2})
        assert store.get_file("f") == {"v": 2}

    def test_missing_blob(self, store):
        assert store.get_file("nope") is None


class TestRecordUpload:
    def test_records_blobs_and_references(self, store):
        upload = store.record_upload(
            [("essay.txt", b"hello", "text/plain"), ("scan.png", b"\x89PNG", None)],
            INFO,
            upload_type="answer",
            uploaded_by="sam@school.edu",
        )
        assert upload["result"] is None
        assert upload["uploadedBy"] == "sam@school.edu"
        assert upload["fileIds"] == [f["id"] for f in upload["files"]]

        blob = store.get_file(upload["files"][0]["id"])
        assert blob["data"] == "data:text/plain;base64,aGVsbG8="
        assert blob["studentName"] == "Sam"
        assert blob["uploadType"] == "answer"
        assert store.get_file(upload["files"][1]["id"])["type"] == "image/png"

    def test_oversized_files_skipped(self, store, monkeypatch):
        monkeypatch.setattr(uploads_module, "MAX_FILE_SIZE_BYTES", 4)
        upload = store.record_upload([("big.txt", b"too large", "text/plain"), ("ok.txt", b"ok", "text/plain")], INFO)
        assert [f["name"] for f in upload["files"]] == ["ok.txt"]

    def test_nothing_recorded_when_every_file_is_too_large(self, store, storage, monkeypatch):
        monkeypatch.setattr(uploads_module, "MAX_FILE_SIZE_BYTES", 3)
        assert store.record_upload([("big.txt", b"too large", "text/plain")], INFO) is None
        assert store.uploads == []
        assert store.file_storage == {}
        assert storage.get_item(STUDENT_UPLOADS_KEY) is None

    def test_nothing_recorded_without_files(self, store):
        assert store.record_upload([], INFO, teacher=True) is None
        assert store.teacher_uploads == []

    def test_anonymous_and_teacher(self, store):
        upload = store.record_upload([("q.txt", b"q", "text/plain")], INFO, upload_type="question", teacher=True)
        assert upload["uploadedBy"] == "Anonymous"
        assert store.teacher_uploads[0] is upload
        assert store.uploads == []

    def test_record_upload_paths(self, store, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"notes")
        upload = store.record_upload_paths([str(path)], INFO)
        assert upload["files"][0]["name"] == "notes.txt"
        assert upload["files"][0]["type"] == "text/plain"

    def test_attach_result(self, store, storage):
        upload = store.record_upload([("a.txt", b"a", "text/plain")], INFO)
        result = {"total_marks": 85, "grade": "A"}
        assert store.attach_result(upload["id"], result)["result"] == result
        assert json.loads(storage.get_item(STUDENT_UPLOADS_KEY))[0]["result"] == result

    def test_attach_result_after_delete(self, store):
        upload = store.add_upload({})
        store.delete_upload(upload["id"])
        assert store.attach_result(upload["id"], {"grade": "A"}) is None


class TestInfoModalFlag:
    def test_shown_once(self, store, storage):
        assert store.has_shown_student_info_modal is False
        store.mark_student_info_modal_shown()
        assert UploadStore(storage).has_shown_student_info_modal is True


class TestDashboards:
    @pytest.fixture
    def api(self, client):
        return ApiClient(base_url=f"http://testserver{API}", http=client)

    def login(self, client, api, storage, email):
        client.cookies.clear()
        session_api = ApiClient(base_url=api.base_url, http=client)
        SessionStore(session_api, storage).login(email, "secret123")
        return session_api

    def test_teacher_assigns_and_student_completes(self, client, api, teacher, student):
        teacher_api = self.login(client, api, LocalStorage(":memory:"), "teacher@school.edu")
        teacher_board = TeacherDashboard(teacher_api)
        created = teacher_board.create_test(
            title="Optics", subject="Physics", questions=[{"text": "What is refraction?", "marks": 100}],
        )
        teacher_board.assign_test(created["id"], ["10A"])
        assert teacher_board.stats == {"total_tests_created": 1, "tests_assigned": 1}
        assert len(teacher_board.sections) == 6

        student_api = self.login(client, api, LocalStorage(":memory:"), "sam@school.edu")
        board = StudentDashboard(student_api)
        board.refresh()
        assert [t["id"] for t in board.filtered("assigned")] == [created["id"]]
        assert len(board.practice_tests) == 3
        assert board.stats["pending_tests"] == 1

        served = board.start_test(created["id"])
        board.submit_test(created["id"], {q["id"]: "Light bends between media." for q in served["questions"]})
        assert board.filtered("assigned") == []
        assert [t["id"] for t in board.filtered("completed")] == [created["id"]]
        assert board.stats["completed_assigned_tests"] == 1
        assert board.stats["best_subject"] in ("Physics", "None")

        server_stats = student_api.get("/tests/dashboard")["data"]
        assert board.stats == server_stats

    def test_upload_through_dashboard(self, client, api, student):
        student_api = self.login(client, api, LocalStorage(":memory:"), "sam@school.edu")
        board = StudentDashboard(student_api)
        created = board.upload_files([("essay.txt", b"text", "text/plain")], INFO)
        assert created["status"] == "analyzing"

        listed = board.uploads()
        assert listed[0]["id"] == created["id"]
        assert listed[0]["status"] == "evaluated"
