"""Integration tests for the notification API endpoints."""

from __future__ import annotations

import time

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from app.application.use_cases.notifications import NotificationDispatchService
from app.domain.exceptions import PublishFailure
from app.interfaces.api.dependencies import get_dispatch_service

from .conftest import FakeChannel, InlineExecutor


def _reset_database() -> None:
    from app.infrastructure import database

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)


@pytest.fixture()
def fake_channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture()
def client(session_factory, fake_channel):
    """Return a test client whose dispatch service publishes to ``fake_channel``."""

    from main import create_app

    app = create_app()
    service = NotificationDispatchService(
        session_factory, fake_channel, executor=InlineExecutor()
    )
    app.dependency_overrides[get_dispatch_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def live_client():
    """Return a test client wired to the real websocket channel and database."""

    _reset_database()
    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def _wait_for_status(client: TestClient, notification_id: int, expected: str) -> dict:
    deadline = time.monotonic() + 5
    while True:
        body = client.get(f"/notifications/{notification_id}").json()
        if body["status"] == expected or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


def test_submit_and_reconcile_through_api(client: TestClient, fake_channel: FakeChannel) -> None:
    response = client.post(
        "/notifications/",
        json={"recipient": "user@example.com", "type": "EMAIL", "body": "Hi"},
    )
    assert response.status_code == 202
    created = response.json()
    assert created["status"] == "PENDING"
    assert created["id"] == 1

    fake_channel.succeed()

    detail = client.get(f"/notifications/{created['id']}")
    assert detail.status_code == 200
    assert detail.json()["status"] == "SENT"


def test_failed_publish_is_visible_in_listing(client: TestClient, fake_channel: FakeChannel) -> None:
    created = client.post(
        "/notifications/",
        json={"recipient": "+1555", "type": "SMS", "body": "Code:123"},
    ).json()
    fake_channel.fail(PublishFailure("timeout"))

    failed = client.get("/notifications/", params={"status": "FAILED"})

    assert failed.status_code == 200
    assert [item["id"] for item in failed.json()] == [created["id"]]


def test_submit_rejects_blank_recipient(client: TestClient, fake_channel: FakeChannel) -> None:
    response = client.post(
        "/notifications/", json={"recipient": "   ", "type": "PUSH", "body": "x"}
    )

    assert response.status_code == 400
    assert fake_channel.messages == []
    assert client.get("/notifications/").json() == []


def test_submit_rejects_unknown_type(client: TestClient) -> None:
    response = client.post(
        "/notifications/", json={"recipient": "user@example.com", "type": "FAX"}
    )

    assert response.status_code == 422


def test_unknown_notification_returns_404(client: TestClient) -> None:
    assert client.get("/notifications/42").status_code == 404
    assert (
        client.patch("/notifications/42/status", json={"status": "SENT"}).status_code
        == 404
    )


def test_status_update_conflicts_once_terminal(client: TestClient, fake_channel: FakeChannel) -> None:
    created = client.post(
        "/notifications/",
        json={"recipient": "user@example.com", "type": "EMAIL", "body": "Hi"},
    ).json()

    moved = client.patch(f"/notifications/{created['id']}/status", json={"status": "FAILED"})
    assert moved.status_code == 200
    assert moved.json()["status"] == "FAILED"

    conflict = client.patch(f"/notifications/{created['id']}/status", json={"status": "SENT"})
    assert conflict.status_code == 409


def test_websocket_consumer_receives_published_notification(live_client: TestClient) -> None:
    with live_client.websocket_connect("/notifications/ws/notifications.email") as consumer:
        created = live_client.post(
            "/notifications/",
            json={
                "recipient": "user@example.com",
                "type": "EMAIL",
                "title": "Welcome",
                "body": "Hi",
                "merchant_id": "m-9",
            },
        ).json()

        frame = consumer.receive_json()

    assert frame["type"] == "notification"
    assert frame["data"]["notification_id"] == created["id"]
    assert frame["data"]["receiver"] == "user@example.com"
    assert frame["data"]["merchant_id"] == "m-9"
    assert _wait_for_status(live_client, created["id"], "SENT")["status"] == "SENT"


def test_notification_without_consumers_is_marked_failed(live_client: TestClient) -> None:
    created = live_client.post(
        "/notifications/",
        json={"recipient": "device-token", "type": "PUSH", "body": "Ping"},
    ).json()

    assert created["status"] == "PENDING"
    assert _wait_for_status(live_client, created["id"], "FAILED")["status"] == "FAILED"


def test_status_update_accepts_status_names_and_aliases(client: TestClient) -> None:
    created = client.post(
        "/notifications/",
        json={"recipient": "user@example.com", "type": "EMAIL", "body": "Hi"},
    ).json()

    queued = client.patch(f"/notifications/{created['id']}/status", json={"status": "QUEUED"})
    assert queued.status_code == 200
    assert queued.json()["status"] == "PENDING"

    sent = client.patch(f"/notifications/{created['id']}/status", json={"status": "sent"})
    assert sent.status_code == 200
    assert sent.json()["status"] == "SENT"

    unknown = client.patch(f"/notifications/{created['id']}/status", json={"status": "DELIVERED"})
    assert unknown.status_code == 422
