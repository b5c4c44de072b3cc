import asyncio
import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from exameval.config import settings
from exameval.database import get_db
from exameval.dependencies import file_evaluator, get_current_user
from exameval.errors import ErrorResponse
from exameval.evaluators.base import BaseFileEvaluator
from exameval.models import FileBlob, Upload, UploadStatus, UploadType, User
from exameval.schemas import FileBlobResponse, UploadResponse
from exameval.services.files import from_data_url, generate_file_id, to_data_url
from exameval.services.sse_manager import sse_manager, user_channel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])
files_router = APIRouter(tags=["Files"])


async def evaluate_upload_background(upload_id: int, bind, evaluator: BaseFileEvaluator, delay: float):
    """Attach a result to an upload after a simulated analysis delay."""
    if delay > 0:
        await asyncio.sleep(delay)

    db = Session(bind=bind)
    try:
        upload = db.get(Upload, upload_id)
        if upload is None:
            logger.info("Upload %s deleted before evaluation finished", upload_id)
            return

        result = evaluator.evaluate(list(upload.files or []), dict(upload.student_info or {}))
        upload.result = result
        upload.status = UploadStatus.EVALUATED
        db.commit()
        owner_id = upload.uploaded_by_id
    except Exception:
        db.rollback()
        logger.exception("Evaluation failed for upload %s", upload_id)
        return
    finally:
        db.close()

    logger.info("Upload %s evaluated: %s", upload_id, result.get("grade"))
    await sse_manager.broadcast(user_channel(owner_id), {
        "type": "upload_evaluated",
        "data": {"upload_id": upload_id, "result": result},
    })


def _get_owned_upload(db: Session, upload_id: int, user: User) -> Upload:
    upload = db.get(Upload, upload_id)
    if upload is None or upload.uploaded_by_id != user.id:
        raise ErrorResponse("Upload not found", 404)
    return upload


def _get_owned_blob(db: Session, file_id: str, user: User) -> FileBlob:
    blob = db.get(FileBlob, file_id)
    if blob is None or blob.upload.uploaded_by_id != user.id:
        raise ErrorResponse("File not found", 404)
    return blob


@router.post("", status_code=201)
async def create_upload(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(...),
    upload_type: UploadType = Form(UploadType.ANSWER),
    student_name: str = Form(""),
    student_class: str = Form(""),
    subject: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    evaluator: BaseFileEvaluator = Depends(file_evaluator),
):
    """
    Store submitted files and queue their evaluation.
    The upload is returned immediately with status "analyzing"; the result is
    attached in the background and pushed on the uploader's event channel.
    """
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    student_info = {"name": student_name, "class": student_class, "subject": subject}

    upload = Upload(
        student_info=student_info,
        files=[],
        status=UploadStatus.ANALYZING,
        uploaded_by=user.email,
        uploaded_by_id=user.id,
        uploaded_by_role=user.role,
    )

    references = []
    for i, file in enumerate(files):
        content = await file.read()
        if len(content) > max_bytes:
            raise ErrorResponse(
                f"File {file.filename} exceeds the {settings.max_upload_size_mb}MB limit", 400
            )

        file_id = generate_file_id(i)
        upload.blobs.append(FileBlob(
            id=file_id,
            name=file.filename,
            content_type=file.content_type,
            size=len(content),
            data=to_data_url(content, file.content_type),
            upload_type=upload_type,
            uploaded_by=user.email,
            student_name=student_name,
            student_class=student_class,
            subject=subject,
        ))
        references.append({
            "id": file_id,
            "name": file.filename,
            "type": file.content_type,
            "size": len(content),
            "upload_type": upload_type.value,
        })

    upload.files = references
    db.add(upload)
    db.commit()
    db.refresh(upload)

    logger.info("Upload %s stored with %d file(s) by %s", upload.id, len(references), user.email)

    background_tasks.add_task(
        evaluate_upload_background,
        upload.id,
        db.get_bind(),
        evaluator,
        settings.evaluation_delay_seconds,
    )

    return {"success": True, "data": UploadResponse.model_validate(upload)}


@router.get("")
async def list_uploads(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The caller's uploads, most recent first"""
    uploads = (
        db.query(Upload)
        .filter(Upload.uploaded_by_id == user.id, Upload.uploaded_by_role == user.role)
        .order_by(Upload.id.desc())
        .all()
    )
    return {
        "success": True,
        "count": len(uploads),
        "data": [UploadResponse.model_validate(u) for u in uploads],
    }


@router.get("/{upload_id}")
async def get_upload(upload_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "data": UploadResponse.model_validate(_get_owned_upload(db, upload_id, user))}


@router.delete("/{upload_id}")
async def delete_upload(upload_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Deletes the upload together with its file blobs"""
    upload = _get_owned_upload(db, upload_id, user)
    db.delete(upload)
    db.commit()
    return {"success": True, "message": "Upload deleted"}


@files_router.get("/{file_id}")
async def get_file(file_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "data": FileBlobResponse.model_validate(_get_owned_blob(db, file_id, user))}


@files_router.get("/{file_id}/download")
async def download_file(file_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    blob = _get_owned_blob(db, file_id, user)
    return Response(
        content=from_data_url(blob.data),
        media_type=blob.content_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{blob.name}"'},
    )
