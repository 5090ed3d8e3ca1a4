"""
Tests for the /organizations/{organization_id}/messages endpoints.

Tests cover:
- Listing and fetching messages per organization
- Create, update and delete outcomes and their status codes
- Field-keyed validation errors
- Title conflicts within an organization
- Inactive messages rejecting mutation
- Infrastructure and unexpected failures mapped to 500
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.main import app, get_message_logic
from app.logic import MessageLogic
from app.storage import Base, engine


VALID_CONTENT = "This is a valid content message."


def messages_url(organization_id, message_id=None):
    url = f"/organizations/{organization_id}/messages"
    if message_id is not None:
        url += f"/{message_id}"
    return url


def create_message(client, organization_id, title, content=VALID_CONTENT) -> dict:
    """Helper to create a message and return its JSON body."""
    response = client.post(messages_url(organization_id), json={"title": title, "content": content})
    assert response.status_code == 201
    return response.json()


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def org_id():
    return uuid.uuid4()


class TestListAndGet:
    """Test GET endpoints."""

    def test_list_empty_organization(self, client, org_id):
        response = client.get(messages_url(org_id))

        assert response.status_code == 200
        assert response.json() == []

    def test_list_returns_only_organization_messages(self, client, org_id):
        create_message(client, org_id, "First")
        create_message(client, org_id, "Second")
        create_message(client, uuid.uuid4(), "Elsewhere")

        response = client.get(messages_url(org_id))

        assert response.status_code == 200
        titles = [msg["title"] for msg in response.json()]
        assert titles == ["First", "Second"]

    def test_get_message(self, client, org_id):
        created = create_message(client, org_id, "Hello World")

        response = client.get(messages_url(org_id, created["id"]))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["organizationId"] == str(org_id)
        assert data["title"] == "Hello World"
        assert data["content"] == VALID_CONTENT
        assert data["isActive"] is True
        assert data["updatedAt"] is None

    def test_get_missing_message_returns_404(self, client, org_id):
        response = client.get(messages_url(org_id, uuid.uuid4()))

        assert response.status_code == 404
        assert response.json() == {"message": "Message not found."}

    def test_get_message_from_other_organization_returns_404(self, client, org_id):
        created = create_message(client, org_id, "Private")

        response = client.get(messages_url(uuid.uuid4(), created["id"]))

        assert response.status_code == 404

    def test_invalid_uuid_rejected(self, client):
        response = client.get("/organizations/not-a-uuid/messages")

        assert response.status_code == 422

    def test_response_includes_request_id_header(self, client, org_id):
        response = client.get(messages_url(org_id))

        assert response.status_code == 200
        assert "x-request-id" in response.headers


class TestCreate:
    """Test POST /organizations/{organization_id}/messages."""

    def test_create_success(self, client, org_id):
        response = client.post(
            messages_url(org_id),
            json={"title": "Hello World", "content": VALID_CONTENT},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Hello World"
        assert data["organizationId"] == str(org_id)
        assert data["isActive"] is True
        assert data["createdAt"] is not None
        assert data["updatedAt"] is None
        assert response.headers["location"].endswith(messages_url(org_id, data["id"]))

    def test_timestamps_are_sent_as_utc(self, client, org_id):
        created = create_message(client, org_id, "Timestamped")
        url = messages_url(org_id, created["id"])
        client.put(url, json={"title": "Timestamped", "content": VALID_CONTENT, "isActive": True})

        data = client.get(url).json()

        assert created["createdAt"].endswith("Z")
        assert data["createdAt"].endswith("Z")
        assert data["updatedAt"].endswith("Z")

    def test_location_header_resolves(self, client, org_id):
        response = client.post(messages_url(org_id), json={"title": "Findable", "content": VALID_CONTENT})

        follow = client.get(response.headers["location"])

        assert follow.status_code == 200
        assert follow.json()["title"] == "Findable"

    def test_duplicate_title_returns_409(self, client, org_id):
        create_message(client, org_id, "Duplicate", "Some valid content.")

        response = client.post(
            messages_url(org_id),
            json={"title": "Duplicate", "content": "Some valid content."},
        )

        assert response.status_code == 409
        assert response.json() == {"message": "Title must be unique per organization."}

    def test_same_title_allowed_in_other_organization(self, client, org_id):
        create_message(client, org_id, "Shared Title")

        response = client.post(
            messages_url(uuid.uuid4()),
            json={"title": "Shared Title", "content": VALID_CONTENT},
        )

        assert response.status_code == 201

    def test_title_match_is_case_sensitive(self, client, org_id):
        create_message(client, org_id, "Hello World")

        response = client.post(messages_url(org_id), json={"title": "hello world", "content": VALID_CONTENT})

        assert response.status_code == 201

    def test_short_content_returns_400(self, client, org_id):
        response = client.post(messages_url(org_id), json={"title": "Valid Title", "content": "short"})

        assert response.status_code == 400
        assert response.json() == {"Content": ["Content must be 10–1000 characters."]}

    def test_both_fields_invalid_returns_both_errors(self, client, org_id):
        response = client.post(messages_url(org_id), json={"title": "  ", "content": ""})

        assert response.status_code == 400
        assert set(response.json()) == {"Title", "Content"}

    def test_missing_fields_return_400(self, client, org_id):
        response = client.post(messages_url(org_id), json={})

        assert response.status_code == 400
        assert set(response.json()) == {"Title", "Content"}

    def test_invalid_json_returns_422(self, client, org_id):
        response = client.post(
            messages_url(org_id),
            content="not valid json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422


class TestUpdate:
    """Test PUT /organizations/{organization_id}/messages/{message_id}."""

    def test_update_success(self, client, org_id):
        created = create_message(client, org_id, "Original")

        response = client.put(
            messages_url(org_id, created["id"]),
            json={"title": "Renamed", "content": "Updated content here.", "isActive": True},
        )

        assert response.status_code == 204
        assert response.content == b""
        data = client.get(messages_url(org_id, created["id"])).json()
        assert data["title"] == "Renamed"
        assert data["content"] == "Updated content here."
        assert data["updatedAt"] is not None

    def test_update_keeping_title_succeeds(self, client, org_id):
        created = create_message(client, org_id, "Keep Me")

        response = client.put(
            messages_url(org_id, created["id"]),
            json={"title": "Keep Me", "content": "Different content now.", "isActive": True},
        )

        assert response.status_code == 204

    def test_update_to_existing_title_returns_409(self, client, org_id):
        create_message(client, org_id, "NewTitleAlreadyExists")
        target = create_message(client, org_id, "Target")

        response = client.put(
            messages_url(org_id, target["id"]),
            json={"title": "NewTitleAlreadyExists", "content": VALID_CONTENT, "isActive": True},
        )

        assert response.status_code == 409
        assert response.json() == {"message": "Another message with this title already exists."}

    def test_update_missing_message_returns_404(self, client, org_id):
        response = client.put(
            messages_url(org_id, uuid.uuid4()),
            json={"title": "Whatever", "content": VALID_CONTENT, "isActive": True},
        )

        assert response.status_code == 404
        assert response.json() == {"message": "Message not found."}

    def test_update_invalid_fields_returns_400(self, client, org_id):
        created = create_message(client, org_id, "Original")

        response = client.put(
            messages_url(org_id, created["id"]),
            json={"title": "ab", "content": VALID_CONTENT, "isActive": True},
        )

        assert response.status_code == 400
        assert response.json() == {"Title": ["Title must be 3–200 characters."]}

    def test_deactivated_message_cannot_be_updated(self, client, org_id):
        created = create_message(client, org_id, "Soon Inactive")
        url = messages_url(org_id, created["id"])

        deactivate = client.put(url, json={"title": "Soon Inactive", "content": VALID_CONTENT, "isActive": False})
        assert deactivate.status_code == 204
        assert client.get(url).json()["isActive"] is False

        response = client.put(url, json={"title": "x", "content": "bad", "isActive": True})

        assert response.status_code == 400
        assert response.json() == {"IsActive": ["Inactive messages cannot be updated."]}


class TestDelete:
    """Test DELETE /organizations/{organization_id}/messages/{message_id}."""

    def test_delete_success(self, client, org_id):
        created = create_message(client, org_id, "Delete Me")
        url = messages_url(org_id, created["id"])

        response = client.delete(url)

        assert response.status_code == 204
        assert client.get(url).status_code == 404

    def test_delete_twice_returns_404(self, client, org_id):
        created = create_message(client, org_id, "Delete Me")
        url = messages_url(org_id, created["id"])

        assert client.delete(url).status_code == 204
        response = client.delete(url)

        assert response.status_code == 404
        assert response.json() == {"message": "Message not found."}

    def test_delete_inactive_message_returns_400(self, client, org_id):
        created = create_message(client, org_id, "Inactive")
        url = messages_url(org_id, created["id"])
        client.put(url, json={"title": "Inactive", "content": VALID_CONTENT, "isActive": False})

        response = client.delete(url)

        assert response.status_code == 400
        assert response.json() == {"IsActive": ["Only active messages can be deleted."]}

    def test_title_reusable_after_delete(self, client, org_id):
        created = create_message(client, org_id, "Recycled")
        client.delete(messages_url(org_id, created["id"]))

        response = client.post(messages_url(org_id), json={"title": "Recycled", "content": VALID_CONTENT})

        assert response.status_code == 201


class FailingRepository:
    """Repository whose every call fails like an unreachable database."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is unreachable"))

    async def get_all_by_organization(self, organization_id):
        self._fail()

    async def get_by_id(self, organization_id, message_id):
        self._fail()

    async def get_by_title(self, organization_id, title):
        self._fail()


class TestInfrastructureFailures:
    """Database errors surface as 500 without leaking details."""

    @pytest.fixture
    def failing_client(self, client):
        app.dependency_overrides[get_message_logic] = lambda: MessageLogic(FailingRepository())
        try:
            yield client
        finally:
            app.dependency_overrides.clear()

    def test_list_returns_500(self, failing_client, org_id):
        response = failing_client.get(messages_url(org_id))

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error."}

    def test_create_returns_500(self, failing_client, org_id):
        response = failing_client.post(messages_url(org_id), json={"title": "Hello", "content": VALID_CONTENT})

        assert response.status_code == 500

    def test_delete_returns_500(self, failing_client, org_id):
        response = failing_client.delete(messages_url(org_id, uuid.uuid4()))

        assert response.status_code == 500

    def test_unhandled_error_returns_500_with_request_id(self, client, org_id):
        def broken_logic():
            raise RuntimeError("unexpected failure")

        app.dependency_overrides[get_message_logic] = broken_logic
        try:
            response = client.get(messages_url(org_id))
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error."}
        assert "x-request-id" in response.headers
