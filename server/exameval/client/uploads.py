"""
Client upload store: student uploads, teacher uploads and the file blob map.

Each collection is written back to local storage in full after every
mutation. Deleting an upload leaves its blobs in place.
"""
import json
import logging
import mimetypes
import os
import random
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from exameval.client.storage import LocalStorage
from exameval.services.files import MAX_FILE_SIZE_BYTES, generate_file_id, now_ms, to_data_url

logger = logging.getLogger(__name__)

STUDENT_UPLOADS_KEY = "student_uploads"
TEACHER_UPLOADS_KEY = "teacher_uploads"
FILE_STORAGE_KEY = "file_storage"
INFO_MODAL_KEY = "hasShownStudentInfoModal"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UploadStore:
    def __init__(self, storage: LocalStorage, rng: Optional[random.Random] = None):
        self.storage = storage
        self.rng = rng or random.Random()

        self.uploads: List[Dict[str, Any]] = self._load(STUDENT_UPLOADS_KEY, list)
        self.teacher_uploads: List[Dict[str, Any]] = self._load(TEACHER_UPLOADS_KEY, list)
        self.file_storage: Dict[str, Dict[str, Any]] = self._load(FILE_STORAGE_KEY, dict)

        # Ids may run ahead of the clock; never reissue a stored one
        self._last_id = max(
            (
                u["id"] for u in self.uploads + self.teacher_uploads
                if isinstance(u, dict) and isinstance(u.get("id"), int)
            ),
            default=0,
        )

    def _load(self, key: str, kind):
        raw = self.storage.get_item(key)
        if not raw:
            return kind()
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed %s in local storage", key)
            return kind()
        if not isinstance(value, kind):
            logger.warning("Ignoring %s of unexpected type in local storage", key)
            return kind()
        return value

    def _persist(self, key: str, value) -> None:
        if not self.storage.set_item(key, json.dumps(value)):
            logger.warning("%s kept in memory only", key)

    def _next_id(self) -> int:
        # Millisecond clock, bumped when two uploads land in the same ms
        self._last_id = max(now_ms(), self._last_id + 1)
        return self._last_id

    def _new_record(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {**data, "id": self._next_id(), "createdAt": _now_iso()}

    # Uploads

    def add_upload(self, data: Dict[str, Any]) -> Dict[str, Any]:
        upload = self._new_record(data)
        self.uploads.insert(0, upload)
        self._persist(STUDENT_UPLOADS_KEY, self.uploads)
        return upload

    def add_teacher_upload(self, data: Dict[str, Any]) -> Dict[str, Any]:
        upload = self._new_record(data)
        self.teacher_uploads.insert(0, upload)
        self._persist(TEACHER_UPLOADS_KEY, self.teacher_uploads)
        return upload

    def delete_upload(self, upload_id: int) -> None:
        self.uploads = [u for u in self.uploads if u.get("id") != upload_id]
        self._persist(STUDENT_UPLOADS_KEY, self.uploads)

    def delete_teacher_upload(self, upload_id: int) -> None:
        self.teacher_uploads = [u for u in self.teacher_uploads if u.get("id") != upload_id]
        self._persist(TEACHER_UPLOADS_KEY, self.teacher_uploads)

    def attach_result(self, upload_id: int, result: Dict[str, Any], teacher: bool = False) -> Optional[Dict[str, Any]]:
        """Set the evaluation result of a stored upload; None if it is gone."""
        collection, key = (
            (self.teacher_uploads, TEACHER_UPLOADS_KEY) if teacher else (self.uploads, STUDENT_UPLOADS_KEY)
        )
        for upload in collection:
            if upload.get("id") == upload_id:
                upload["result"] = result
                self._persist(key, collection)
                return upload
        logger.info("Upload %s no longer stored, result dropped", upload_id)
        return None

    # Blobs

    def store_file(self, file_id: str, blob: Dict[str, Any]) -> None:
        self.file_storage[file_id] = blob
        self._persist(FILE_STORAGE_KEY, self.file_storage)

    def get_file(self, file_id: str) -> Optional[Dict[str, Any]]:
        return self.file_storage.get(file_id)

    def record_upload(
        self,
        files: Iterable[Tuple[str, bytes, Optional[str]]],
        student_info: Dict[str, str],
        upload_type: str = "answer",
        uploaded_by: Optional[str] = None,
        teacher: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Store each (name, content, content_type) as a blob and add an upload
        referencing them, with no result yet. Files over 10MB are skipped;
        when nothing is left no upload is added and None is returned.
        """
        references = []
        for i, (name, content, content_type) in enumerate(files):
            if len(content) > MAX_FILE_SIZE_BYTES:
                logger.warning("Skipping %s: larger than 10MB", name)
                continue

            content_type = content_type or mimetypes.guess_type(name)[0] or ""
            file_id = generate_file_id(i, self.rng)
            self.store_file(file_id, {
                "id": file_id,
                "name": name,
                "type": content_type,
                "size": len(content),
                "data": to_data_url(content, content_type),
                "uploadType": upload_type,
                "uploadedAt": _now_iso(),
                "studentName": student_info.get("name"),
                "studentClass": student_info.get("class"),
                "subject": student_info.get("subject"),
            })
            references.append({
                "id": file_id,
                "name": name,
                "type": content_type,
                "size": len(content),
                "uploadType": upload_type,
            })

        if not references:
            logger.warning("No files to record for %s", student_info.get("name"))
            return None

        data = {
            "studentInfo": dict(student_info),
            "files": references,
            "result": None,
            "uploadedBy": uploaded_by or "Anonymous",
            "uploadedAt": _now_iso(),
            "fileIds": [f["id"] for f in references],
        }
        return self.add_teacher_upload(data) if teacher else self.add_upload(data)

    def record_upload_paths(self, paths: Iterable[str], student_info: Dict[str, str], **kwargs) -> Optional[Dict[str, Any]]:
        files = []
        for path in paths:
            with open(path, "rb") as f:
                files.append((os.path.basename(path), f.read(), mimetypes.guess_type(path)[0]))
        return self.record_upload(files, student_info, **kwargs)

    # One-time student info prompt

    @property
    def has_shown_student_info_modal(self) -> bool:
        return self.storage.get_item(INFO_MODAL_KEY) == "true"

    def mark_student_info_modal_shown(self) -> None:
        self.storage.set_item(INFO_MODAL_KEY, "true")
