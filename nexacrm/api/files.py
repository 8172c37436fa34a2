"""File upload, download and metadata endpoints."""

import logging

from fastapi import APIRouter, Depends, Form, UploadFile, status
from fastapi import File as FormFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from nexacrm.api.leads import LIKE_ESCAPE, contains_pattern, get_owned_lead
from nexacrm.core.errors import NotFoundError, ValidationError
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.models.file import File
from nexacrm.models.user import User
from nexacrm.schemas.file import FileRead, FileUpdate
from nexacrm.services import file_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


def _get_owned_file(db: Session, file_id: int, user_id: int) -> File:
    record = db.query(File).filter(File.id == file_id, File.user_id == user_id).first()
    if not record:
        raise NotFoundError("File not found")
    return record


@router.get("", response_model=list[FileRead])
async def list_files(
    lead_id: int | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(File).filter(File.user_id == current_user.id)
    if lead_id is not None:
        query = query.filter(File.lead_id == lead_id)
    if search:
        query = query.filter(File.original_name.ilike(contains_pattern(search), escape=LIKE_ESCAPE))
    return query.order_by(File.created_at.desc(), File.id.desc()).all()


@router.post("/upload", response_model=list[FileRead], status_code=status.HTTP_201_CREATED)
async def upload_files(
    files: list[UploadFile] = FormFile(default=[]),
    lead_id: int | None = Form(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > file_storage.MAX_FILES_PER_UPLOAD:
        raise ValidationError(f"At most {file_storage.MAX_FILES_PER_UPLOAD} files per upload")
    for upload in files:
        file_storage.check_extension(upload.filename)
    if lead_id is not None:
        get_owned_lead(db, lead_id, current_user.id)

    stored: list[str] = []
    records: list[File] = []
    try:
        for upload in files:
            stored_name, size = await file_storage.save_upload(upload)
            stored.append(stored_name)
            record = File(
                user_id=current_user.id,
                lead_id=lead_id,
                original_name=upload.filename,
                stored_name=stored_name,
                mime_type=upload.content_type,
                size=size,
            )
            db.add(record)
            records.append(record)
        db.commit()
    except Exception:
        db.rollback()
        for stored_name in stored:
            file_storage.remove_blob(stored_name)
        raise

    for record in records:
        db.refresh(record)
    logger.info("User %s uploaded %d file(s)", current_user.id, len(records))
    return records


@router.put("/{file_id}", response_model=FileRead)
async def update_file(
    file_id: int,
    file_in: FileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    record = _get_owned_file(db, file_id, current_user.id)
    if "lead_id" in file_in.model_fields_set:
        if file_in.lead_id is not None:
            get_owned_lead(db, file_in.lead_id, current_user.id)
        record.lead_id = file_in.lead_id
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{file_id}")
async def delete_file(file_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    record = _get_owned_file(db, file_id, current_user.id)
    file_storage.remove_blob(record.stored_name)
    db.delete(record)
    db.commit()
    return {"success": True, "id": file_id}


@router.get("/download/{file_id}")
async def download_file(file_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    record = _get_owned_file(db, file_id, current_user.id)
    path = file_storage.blob_path(record.stored_name)
    if not path.is_file():
        raise NotFoundError("File content is missing")
    return FileResponse(
        path,
        filename=record.original_name,
        media_type=record.mime_type or "application/octet-stream",
    )
