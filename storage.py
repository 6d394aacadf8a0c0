"""
GridFS-backed blob store for uploaded images and resumes.

Files land in the `uploads` bucket with their content type and an optional
`kind` tag in the GridFS metadata. The most recent file of a kind (e.g. the
resume) is resolved by upload date.
"""

import logging
import os
from urllib.parse import quote
from typing import BinaryIO, Iterator, Optional

from bson import ObjectId
from fastapi import Depends, HTTPException, Request, UploadFile
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo import DESCENDING

from config import ALLOWED_DOC_EXTENSIONS, ALLOWED_IMAGE_EXTENSIONS, MAX_UPLOAD_BYTES, PUBLIC_BASE_URL, UPLOAD_BUCKET
from database import get_db

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class BlobStore:
    def __init__(self, db, bucket_name: str = UPLOAD_BUCKET):
        self.bucket = GridFSBucket(db, bucket_name=bucket_name)
        self.files = db[f"{bucket_name}.files"]

    def put(self, filename: str, source: BinaryIO, content_type: str, kind: Optional[str] = None) -> ObjectId:
        metadata = {"contentType": content_type or DEFAULT_CONTENT_TYPE}
        if kind:
            metadata["kind"] = kind
        return self.bucket.upload_from_stream(filename, source, metadata=metadata)

    def info(self, file_id: ObjectId) -> Optional[dict]:
        return self.files.find_one({"_id": file_id})

    def find_by_filename(self, filename: str) -> Optional[dict]:
        return self.files.find_one({"filename": filename})

    def latest(self, kind: str) -> Optional[dict]:
        docs = list(self.files.find({"metadata.kind": kind}).sort("uploadDate", DESCENDING).limit(1))
        return docs[0] if docs else None

    def stream(self, file_id: ObjectId) -> Iterator[bytes]:
        grid_out = self.bucket.open_download_stream(file_id)
        for chunk in grid_out:
            yield chunk

    def delete(self, file_id: ObjectId) -> bool:
        try:
            self.bucket.delete(file_id)
        except NoFile:
            return False
        return True


def get_blob_store(db=Depends(get_db)) -> BlobStore:
    return BlobStore(db)


def content_type_of(info: dict) -> str:
    metadata = info.get("metadata") or {}
    return metadata.get("contentType") or info.get("contentType") or DEFAULT_CONTENT_TYPE


def inline_disposition(filename: str) -> str:
    """Content-Disposition for any filename; header values must stay latin-1."""
    fallback = filename.encode("ascii", "ignore").decode().replace('"', "").replace("\\", "") or "file"
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# ==========
# Validation
# ==========
def extension_of(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower().lstrip(".")


def check_upload(upload: UploadFile) -> int:
    """Reject disallowed extensions and oversized files; return the size in bytes."""
    ext = extension_of(upload.filename)
    if ext not in ALLOWED_IMAGE_EXTENSIONS | ALLOWED_DOC_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"File type .{ext} is not allowed")

    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    if size > MAX_UPLOAD_BYTES:
        limit_mb = MAX_UPLOAD_BYTES // (1024 * 1024)
        raise HTTPException(status_code=413, detail=f"File is too large. Maximum size is {limit_mb}MB.")
    return size


# ===============
# URL resolution
# ===============
def public_origin(request: Request) -> str:
    """Origin that browsers on any host can use to reach this API."""
    if PUBLIC_BASE_URL:
        return PUBLIC_BASE_URL
    forwarded_host = request.headers.get("x-forwarded-host")
    if forwarded_host:
        proto = request.headers.get("x-forwarded-proto", request.url.scheme)
        return f"{proto.split(',')[0].strip()}://{forwarded_host.split(',')[0].strip()}"
    return str(request.base_url).rstrip("/")


def file_url(request: Request, file_id) -> str:
    return f"{public_origin(request)}/api/uploads/file/{file_id}"


def store_upload(store: BlobStore, request: Request, upload: UploadFile, kind: Optional[str] = None) -> dict:
    size = check_upload(upload)
    content_type = upload.content_type or DEFAULT_CONTENT_TYPE
    file_id = store.put(upload.filename, upload.file, content_type, kind)
    logger.info("Stored upload %s (%s, %d bytes) as %s", upload.filename, content_type, size, file_id)
    return {
        "fileId": str(file_id),
        "originalName": upload.filename,
        "fileUrl": file_url(request, file_id),
        "size": size,
        "mimetype": content_type,
        "kind": kind,
    }
