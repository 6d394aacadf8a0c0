"""
File uploads streamed into GridFS, public retrieval by id and resume lookup.
"""

import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import StreamingResponse

import sections
from database import get_db, to_object_id
from routes import respond
from security import get_current_admin
from storage import BlobStore, check_upload, content_type_of, file_url, get_blob_store, inline_disposition, store_upload

router = APIRouter(prefix="/api/uploads", tags=["uploads"])
logger = logging.getLogger(__name__)

MAX_FILES = 10
RESUME_KIND = "resume"
OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


@router.post("/single")
def upload_single(
    request: Request,
    file: UploadFile = File(...),
    kind: Optional[str] = Form(None),
    store: BlobStore = Depends(get_blob_store),
    _: dict = Depends(get_current_admin),
):
    return respond(store_upload(store, request, file, kind or None), "File uploaded successfully")


@router.post("/multiple")
def upload_multiple(
    request: Request,
    files: List[UploadFile] = File(...),
    store: BlobStore = Depends(get_blob_store),
    _: dict = Depends(get_current_admin),
):
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    if len(files) > MAX_FILES:
        raise HTTPException(status_code=400, detail=f"At most {MAX_FILES} files can be uploaded at once")
    # a rejected batch stores nothing
    for f in files:
        check_upload(f)
    return respond([store_upload(store, request, f) for f in files], "Files uploaded successfully")


@router.get("/file/{file_id}")
def get_file(file_id: str, store: BlobStore = Depends(get_blob_store)):
    oid = to_object_id(file_id, "file id")
    info = store.info(oid)
    if not info:
        raise HTTPException(status_code=404, detail="File not found")
    headers = {"Content-Disposition": inline_disposition(info.get("filename") or str(oid))}
    if info.get("length") is not None:
        headers["Content-Length"] = str(info["length"])
    return StreamingResponse(store.stream(oid), media_type=content_type_of(info), headers=headers)


@router.post("/resume")
def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    store: BlobStore = Depends(get_blob_store),
    db=Depends(get_db),
    _: dict = Depends(get_current_admin),
):
    result = store_upload(store, request, file, RESUME_KIND)
    result["portfolioUpdated"] = sections.set_resume_url(db, result["fileUrl"])
    return respond(result, "Resume uploaded successfully")


@router.get("/resume")
def resume_info(request: Request, store: BlobStore = Depends(get_blob_store)):
    latest = store.latest(RESUME_KIND)
    if not latest:
        raise HTTPException(status_code=404, detail="Resume not found")
    return respond({
        "fileId": str(latest["_id"]),
        "filename": latest.get("filename"),
        "fileUrl": file_url(request, latest["_id"]),
        "uploadedAt": latest.get("uploadDate"),
    }, "Resume available")


@router.delete("/{id_or_filename}")
def delete_file(id_or_filename: str, store: BlobStore = Depends(get_blob_store), _: dict = Depends(get_current_admin)):
    if OBJECT_ID_RE.match(id_or_filename):
        oid = to_object_id(id_or_filename, "file id")
    else:
        info = store.find_by_filename(id_or_filename)
        if not info:
            raise HTTPException(status_code=404, detail="File not found")
        oid = info["_id"]

    if not store.delete(oid):
        raise HTTPException(status_code=404, detail="File not found")
    logger.info("Deleted upload %s", oid)
    return respond(None, "File deleted")
