"""
Tests for uploads: storing into the blob store, public retrieval, the resume
shortcut and deletion.
"""

import io
from urllib.parse import quote

from bson import ObjectId

import storage

PDF = b"%PDF-1.4 fake resume"
PNG = b"\x89PNG\r\n\x1a\n fake image"


def _upload(client, headers, name="avatar.png", payload=PNG, mimetype="image/png", **data):
    return client.post("/api/uploads/single", files={"file": (name, payload, mimetype)}, data=data, headers=headers)


def test_single_upload_returns_public_url(client, auth_headers, blob_store):
    res = _upload(client, auth_headers, kind="avatar")

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["originalName"] == "avatar.png"
    assert data["size"] == len(PNG)
    assert data["mimetype"] == "image/png"
    assert data["kind"] == "avatar"
    assert data["fileUrl"] == f"http://testserver/api/uploads/file/{data['fileId']}"
    assert blob_store.files[ObjectId(data["fileId"])]["metadata"] == {"contentType": "image/png", "kind": "avatar"}


def test_upload_url_honours_forwarded_host(client, auth_headers):
    headers = {**auth_headers, "X-Forwarded-Host": "api.ada.dev", "X-Forwarded-Proto": "https"}

    data = _upload(client, headers).json()["data"]

    assert data["fileUrl"].startswith("https://api.ada.dev/api/uploads/file/")


def test_upload_requires_admin(client):
    assert _upload(client, {}).status_code == 401


def test_disallowed_extension(client, auth_headers, blob_store):
    res = _upload(client, auth_headers, name="payload.exe", mimetype="application/octet-stream")

    assert res.status_code == 400
    assert res.json()["message"] == "File type .exe is not allowed"
    assert blob_store.files == {}


def test_multiple_upload(client, auth_headers):
    files = [
        ("files", ("one.png", PNG, "image/png")),
        ("files", ("two.jpg", b"jpeg", "image/jpeg")),
    ]

    res = client.post("/api/uploads/multiple", files=files, headers=auth_headers)

    assert res.status_code == 200
    assert [f["originalName"] for f in res.json()["data"]] == ["one.png", "two.jpg"]


def test_file_is_streamed_with_stored_content_type(client, auth_headers):
    file_id = _upload(client, auth_headers).json()["data"]["fileId"]

    res = client.get(f"/api/uploads/file/{file_id}")

    assert res.status_code == 200
    assert res.content == PNG
    assert res.headers["content-type"] == "image/png"
    assert res.headers["content-disposition"] == "inline; filename=\"avatar.png\"; filename*=UTF-8''avatar.png"
    assert res.headers["cross-origin-resource-policy"] == "cross-origin"


def test_file_invalid_id(client):
    res = client.get("/api/uploads/file/nope")

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid file id format"


def test_file_missing(client):
    res = client.get(f"/api/uploads/file/{ObjectId()}")

    assert res.status_code == 404
    assert res.json()["message"] == "File not found"


def test_non_latin_filename_is_served(client, auth_headers):
    name = "简历.pdf"
    file_id = _upload(client, auth_headers, name=name, payload=PDF, mimetype="application/pdf").json()["data"]["fileId"]

    res = client.get(f"/api/uploads/file/{file_id}")

    assert res.status_code == 200
    assert res.content == PDF
    assert res.headers["content-disposition"] == f"inline; filename=\".pdf\"; filename*=UTF-8''{quote(name)}"


def test_file_without_content_type_is_octet_stream(client, blob_store):
    file_id = blob_store.put("raw.bin", io.BytesIO(b"\x00\x01"), None)

    res = client.get(f"/api/uploads/file/{file_id}")

    assert res.status_code == 200
    assert res.headers["content-type"] == "application/octet-stream"
    assert res.content == b"\x00\x01"


def test_oversized_upload(client, auth_headers, blob_store, monkeypatch):
    monkeypatch.setattr(storage, "MAX_UPLOAD_BYTES", 1024 * 1024)

    res = _upload(client, auth_headers, name="huge.png", payload=b"x" * (1024 * 1024 + 1))

    assert res.status_code == 413
    assert res.json() == {"success": False, "message": "File is too large. Maximum size is 1MB."}
    assert blob_store.files == {}


def test_rejected_batch_stores_nothing(client, auth_headers, blob_store):
    files = [
        ("files", ("a.png", PNG, "image/png")),
        ("files", ("b.exe", b"MZ", "application/octet-stream")),
    ]

    res = client.post("/api/uploads/multiple", files=files, headers=auth_headers)

    assert res.status_code == 400
    assert res.json()["message"] == "File type .exe is not allowed"
    assert blob_store.files == {}


class TestResume:
    def test_no_resume_yet(self, client):
        res = client.get("/api/uploads/resume")

        assert res.status_code == 404
        assert res.json()["message"] == "Resume not found"

    def test_upload_points_portfolio_at_new_file(self, client, auth_headers, portfolio):
        res = client.post("/api/uploads/resume", files={"file": ("cv.pdf", PDF, "application/pdf")}, headers=auth_headers)

        assert res.status_code == 200
        data = res.json()["data"]
        assert data["kind"] == "resume"
        assert data["portfolioUpdated"] is True
        resume = client.get("/api/portfolio/section/resume").json()["data"]
        assert resume["fileUrl"] == data["fileUrl"]

    def test_upload_without_portfolio(self, client, auth_headers):
        res = client.post("/api/uploads/resume", files={"file": ("cv.pdf", PDF, "application/pdf")}, headers=auth_headers)

        assert res.status_code == 200
        assert res.json()["data"]["portfolioUpdated"] is False

    def test_latest_resume_wins(self, client, auth_headers):
        client.post("/api/uploads/resume", files={"file": ("old.pdf", PDF, "application/pdf")}, headers=auth_headers)
        newer = client.post("/api/uploads/resume", files={"file": ("new.pdf", PDF, "application/pdf")}, headers=auth_headers)
        _upload(client, auth_headers)

        res = client.get("/api/uploads/resume")

        assert res.status_code == 200
        data = res.json()["data"]
        assert data["filename"] == "new.pdf"
        assert data["fileId"] == newer.json()["data"]["fileId"]


class TestDelete:
    def test_delete_by_id(self, client, auth_headers):
        file_id = _upload(client, auth_headers).json()["data"]["fileId"]

        assert client.delete(f"/api/uploads/{file_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/uploads/file/{file_id}").status_code == 404

    def test_delete_by_filename(self, client, auth_headers, blob_store):
        _upload(client, auth_headers, name="banner.png")

        res = client.delete("/api/uploads/banner.png", headers=auth_headers)

        assert res.status_code == 200
        assert blob_store.files == {}

    def test_delete_missing(self, client, auth_headers):
        assert client.delete(f"/api/uploads/{ObjectId()}", headers=auth_headers).status_code == 404
        assert client.delete("/api/uploads/ghost.png", headers=auth_headers).status_code == 404

    def test_delete_requires_admin(self, client):
        assert client.delete(f"/api/uploads/{ObjectId()}").status_code == 401
