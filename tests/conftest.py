"""
Shared fixtures: an in-memory MongoDB (mongomock), an in-memory blob store
standing in for GridFS, and an authenticated admin.
"""

from datetime import datetime, timedelta

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import database
from main import app
from security import hash_password, token_for
from storage import get_blob_store

ADMIN_PASSWORD = "s3cret-pass"


class MemoryBlobStore:
    """Holds uploaded files in dicts, mirroring the GridFS files-collection shape."""

    def __init__(self):
        self.files = {}
        self.data = {}
        self._clock = datetime(2024, 1, 1)

    def put(self, filename, source, content_type, kind=None):
        oid = ObjectId()
        payload = source.read()
        metadata = {"contentType": content_type}
        if kind:
            metadata["kind"] = kind
        self._clock += timedelta(seconds=1)
        self.files[oid] = {
            "_id": oid,
            "filename": filename,
            "length": len(payload),
            "uploadDate": self._clock,
            "metadata": metadata,
        }
        self.data[oid] = payload
        return oid

    def info(self, file_id):
        return self.files.get(file_id)

    def find_by_filename(self, filename):
        return next((f for f in self.files.values() if f["filename"] == filename), None)

    def latest(self, kind):
        matches = [f for f in self.files.values() if f["metadata"].get("kind") == kind]
        return max(matches, key=lambda f: f["uploadDate"]) if matches else None

    def stream(self, file_id):
        yield self.data[file_id]

    def delete(self, file_id):
        if file_id not in self.files:
            return False
        del self.files[file_id]
        del self.data[file_id]
        return True


@pytest.fixture
def mongo_db(monkeypatch):
    db = mongomock.MongoClient().db
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def blob_store():
    store = MemoryBlobStore()
    app.dependency_overrides[get_blob_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_blob_store, None)


@pytest.fixture
def client(mongo_db, blob_store):
    return TestClient(app)


@pytest.fixture
def admin_user(mongo_db):
    doc = {
        "name": "Admin",
        "email": "admin@portfolio.dev",
        "password": hash_password(ADMIN_PASSWORD),
        "role": "admin",
        "createdAt": datetime(2024, 1, 1),
        "updatedAt": datetime(2024, 1, 1),
    }
    doc["_id"] = mongo_db["user"].insert_one(doc).inserted_id
    return doc


@pytest.fixture
def auth_headers(admin_user):
    return {"Authorization": f"Bearer {token_for(admin_user)}"}


@pytest.fixture
def portfolio_payload():
    return {
        "personalDetails": {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "title": "Software Engineer",
            "email": "Ada@Example.com",
            "bio": "Writes programs for engines.",
            "socialLinks": [{"platform": "GitHub", "url": "https://github.com/ada"}],
        },
        "skills": [
            {"category": "Backend", "name": "Python", "proficiency": "Expert"},
            {"category": "Frontend", "name": "CSS", "proficiency": "Intermediate"},
        ],
        "projects": [
            {
                "title": "Analytical Engine",
                "description": "Mechanical general-purpose computer.",
                "techStack": ["Brass", "Punch cards"],
                "order": 2,
            },
            {
                "title": "Bernoulli Numbers",
                "description": "First published algorithm.",
                "techStack": ["Notes"],
                "featured": True,
                "order": 5,
            },
        ],
        "experience": [
            {"company": "Babbage & Co", "role": "Analyst", "startDate": "1842-01-01T00:00:00", "current": True},
        ],
        "education": [
            {"institution": "Home tutoring", "degree": "Mathematics", "startYear": 1830, "endYear": 1835},
        ],
    }


@pytest.fixture
def portfolio(client, auth_headers, portfolio_payload):
    res = client.post("/api/portfolio", json=portfolio_payload, headers=auth_headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]
