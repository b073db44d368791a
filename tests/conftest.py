import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Settings are read when the app starts; give tests a URI before any import
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/contact_form_test")

from fastapi.testclient import TestClient  # noqa: E402

from contact_backend.main import app  # noqa: E402


@pytest.fixture
def contacts_store():
    """In-memory stand-in for the contacts collection."""
    return []


@pytest.fixture
def fake_db(contacts_store):
    collection = MagicMock()

    async def insert_one(document):
        document = dict(document)
        document["_id"] = len(contacts_store) + 1
        contacts_store.append(document)
        return MagicMock(inserted_id=document["_id"])

    collection.insert_one = AsyncMock(side_effect=insert_one)

    db = MagicMock()
    db.__getitem__.return_value = collection
    db.contacts = collection
    return db


@pytest.fixture
def client(monkeypatch, fake_db):
    """TestClient with the endpoint's database swapped for the fake one.

    The client is not entered as a context manager, so the lifespan (and the
    real connector) never runs.
    """
    monkeypatch.setattr("contact_backend.api.v1.endpoints.contact.get_db", lambda: fake_db)
    return TestClient(app)


@pytest.fixture
def valid_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+14155550100",
        "message": "Please contact me about a project.",
    }
