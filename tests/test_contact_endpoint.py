from datetime import datetime

import pytest

from contact_backend.db.mongo import DatabaseNotConnectedError


def test_index_returns_greeting(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text


def test_health_reports_disconnected_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": {"connected": False}}


def test_valid_submission_is_stored(client, valid_payload, contacts_store):
    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 201
    assert response.json() == {"success": True, "message": "Message sent successfully"}
    assert len(contacts_store) == 1

    stored = contacts_store[0]
    assert stored["name"] == "Jane Doe"
    assert stored["email"] == "jane@example.com"
    assert stored["phone"] == "+14155550100"
    assert stored["message"] == "Please contact me about a project."
    assert isinstance(stored["submittedAt"], datetime)


def test_fields_are_trimmed_before_storing(client, contacts_store):
    response = client.post("/contact", json={
        "name": "  Jane Doe  ",
        "email": " Jane@Example.com ",
        "message": "   Please contact me about a project.   ",
    })

    assert response.status_code == 201
    stored = contacts_store[0]
    assert stored["name"] == "Jane Doe"
    assert stored["email"] == "jane@example.com"
    assert stored["message"] == "Please contact me about a project."
    assert stored["phone"] is None


def test_same_payload_twice_creates_two_records(client, valid_payload, contacts_store):
    first = client.post("/contact", json=valid_payload)
    second = client.post("/contact", json=valid_payload)

    assert first.status_code == second.status_code == 201
    assert len(contacts_store) == 2
    assert contacts_store[0]["_id"] != contacts_store[1]["_id"]


@pytest.mark.parametrize("missing", ["name", "email", "message"])
def test_missing_required_field_is_rejected(client, valid_payload, contacts_store, missing):
    del valid_payload[missing]

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert [error["field"] for error in body["errors"]] == [missing]
    assert contacts_store == []


def test_blank_name_is_rejected(client, valid_payload, contacts_store):
    valid_payload["name"] = "   "

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "name", "message": "Name is required"}]
    assert contacts_store == []


def test_short_message_after_trim_is_rejected(client, valid_payload, contacts_store):
    valid_payload["message"] = "   too short   "

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "message"
    assert contacts_store == []


@pytest.mark.parametrize("email", ["not-an-email", "jane@", "@example.com", "jane example.com"])
def test_invalid_email_is_rejected(client, valid_payload, contacts_store, email):
    valid_payload["email"] = email

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "email", "message": "Please provide a valid email address"}
    ]
    assert contacts_store == []


@pytest.mark.parametrize("phone", ["12345", "+1 415 555 0100", "phone-number", "+1234567890123456"])
def test_invalid_phone_is_rejected(client, valid_payload, contacts_store, phone):
    valid_payload["phone"] = phone

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "phone"
    assert contacts_store == []


def test_all_failed_rules_are_listed(client, contacts_store):
    response = client.post("/contact", json={
        "name": "",
        "email": "nope",
        "phone": "abc",
        "message": "short",
    })

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"name", "email", "phone", "message"}
    assert contacts_store == []


def test_operator_object_in_name_never_reaches_storage(client, valid_payload, contacts_store):
    valid_payload["name"] = {"$gt": ""}

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "name", "message": "Name must be a string"}]
    assert contacts_store == []


def test_operator_tokens_are_stripped_from_name(client, valid_payload, contacts_store):
    valid_payload["name"] = "Jane $where Doe"

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 201
    assert contacts_store[0]["name"] == "Jane Doe"
    assert "$" not in contacts_store[0]["name"]


def test_name_emptied_by_sanitization_is_rejected(client, valid_payload, contacts_store):
    valid_payload["name"] = "$where"

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid input detected"}
    assert contacts_store == []


def test_email_broken_by_sanitization_is_rejected(client, valid_payload, contacts_store):
    valid_payload["email"] = "$ne@example.com"

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid input detected"}
    assert contacts_store == []


def test_message_shortened_by_sanitization_is_rejected(client, valid_payload, contacts_store):
    valid_payload["message"] = "Hi $where there"

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid input detected"}
    assert contacts_store == []


def test_prices_in_message_are_stored_unchanged(client, valid_payload, contacts_store):
    valid_payload["message"] = "Cost: $100"

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 201
    assert contacts_store[0]["message"] == "Cost: $100"


def test_unknown_fields_are_not_stored(client, valid_payload, contacts_store):
    valid_payload["$where"] = "sleep(1000)"
    valid_payload["isAdmin"] = True

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 201
    assert set(contacts_store[0]) == {"_id", "name", "email", "phone", "message", "submittedAt"}


def test_invalid_json_body_is_rejected(client, contacts_store):
    response = client.post(
        "/contact",
        content="{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["errors"]
    assert contacts_store == []


def test_non_object_body_is_rejected(client, contacts_store):
    response = client.post("/contact", json=["Jane Doe"])

    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "body", "message": "Request body must be a JSON object"}
    ]
    assert contacts_store == []


def test_write_failure_returns_server_error(client, valid_payload, fake_db):
    fake_db.contacts.insert_one.side_effect = RuntimeError("write concern failed")

    response = client.post("/contact", json=valid_payload)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "An unexpected error occurred. Please try again later.",
    }
    assert fake_db.contacts.insert_one.await_count == 1


def test_missing_connection_returns_server_error(monkeypatch, valid_payload):
    from fastapi.testclient import TestClient
    from contact_backend.main import app

    def not_connected():
        raise DatabaseNotConnectedError("MongoDB connection is not established")

    monkeypatch.setattr("contact_backend.api.v1.endpoints.contact.get_db", not_connected)

    response = TestClient(app).post("/contact", json=valid_payload)

    assert response.status_code == 500
    assert response.json()["success"] is False
