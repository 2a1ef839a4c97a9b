"""Pytest configuration and fixtures."""

from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session as OrmSession

from fusion_edge.api.deps import get_auth_client, get_email_client, get_notifier
from fusion_edge.config import Settings
from fusion_edge.database import Base
from fusion_edge.main import create_app
from fusion_edge.models import Machine
from fusion_edge.schemas.notification import AgentEmailRequest
from fusion_edge.services.auth_client import AuthClient
from fusion_edge.services.email_service import EmailClient

from tests.utils import DEVICE_ID, DEVICE_SECRET


class RecordingDispatcher:
    """Stands in for the Celery dispatcher and records queued emails."""

    def __init__(self):
        self.emails: List[AgentEmailRequest] = []

    def enqueue_agent_email(self, email: AgentEmailRequest) -> Optional[str]:
        self.emails.append(email)
        return f"task-{len(self.emails)}"


@pytest.fixture
def settings():
    """Settings for an isolated in-memory app."""
    return Settings(
        sqlalchemy_database_uri="sqlite://",
        redis_url="redis://localhost:1/0",
        celery_broker_url="memory://",
        celery_result_backend="cache+memory://",
        auth_url="http://auth.test",
        service_role_key="service-key",
        resend_api_url="http://email.test",
        resend_api_key="resend-key",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    """Application with its tables created."""
    app = create_app(settings)
    Base.metadata.create_all(bind=app.state.engine)
    yield app
    Base.metadata.drop_all(bind=app.state.engine)


@pytest.fixture
def test_db(app):
    """Database session sharing the app's in-memory database."""
    db = app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def dispatcher(app):
    """Recording dispatcher installed in place of the Celery one."""
    recorder = RecordingDispatcher()
    app.dependency_overrides[get_notifier] = lambda: recorder
    return recorder


@pytest.fixture
def client(app, dispatcher):
    """Create a test client."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def machine(test_db):
    """A registered device."""
    machine = Machine(device_id=DEVICE_ID, secret_key=DEVICE_SECRET, firmware_version="1.0.0")
    test_db.add(machine)
    test_db.commit()
    test_db.refresh(machine)
    return machine


@pytest.fixture
def auth_requests():
    """Requests received by the fake auth provider."""
    return []


@pytest.fixture
def auth_handler():
    """Default fake auth provider behaviour; tests replace it as needed."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/user":
            if request.headers.get("Authorization") == "Bearer admin-token":
                return httpx.Response(200, json={"id": "admin-user", "email": "admin@example.com"})
            if request.headers.get("Authorization") == "Bearer operator-token":
                return httpx.Response(200, json={"id": "operator-user", "email": "op@example.com"})
            return httpx.Response(401, json={"msg": "invalid JWT"})
        if request.method == "POST" and request.url.path == "/admin/users":
            return httpx.Response(200, json={"id": "new-user-id", "email": "new@example.com"})
        if request.method == "DELETE":
            return httpx.Response(200, json={})
        return httpx.Response(404)

    return handler


@pytest.fixture
def auth_client(app, auth_handler, auth_requests):
    """AuthClient backed by a MockTransport, installed on the app."""

    def record(request: httpx.Request) -> httpx.Response:
        auth_requests.append(request)
        return auth_handler(request)

    client = AuthClient("http://auth.test", "service-key", transport=httpx.MockTransport(record))
    app.dependency_overrides[get_auth_client] = lambda: client
    return client


@pytest.fixture
def sent_emails():
    """Requests received by the fake email provider."""
    return []


@pytest.fixture
def email_client(app, sent_emails):
    """EmailClient backed by a MockTransport, installed on the app."""

    def handler(request: httpx.Request) -> httpx.Response:
        sent_emails.append(request)
        return httpx.Response(200, json={"id": f"email-{len(sent_emails)}"})

    client = EmailClient(
        "http://email.test", "resend-key", "Project Fusion <notifications@resend.dev>",
        transport=httpx.MockTransport(handler),
    )
    app.dependency_overrides[get_email_client] = lambda: client
    return client


@pytest.fixture
def failing_flush():
    """Make any flush touching instances of the given models raise.

    Usage: ``failing_flush(MachineLocation)``. Other flushes go through.
    """
    models = []

    def before_flush(session, flush_context, instances):
        pending = list(session.new) + list(session.dirty)
        if any(isinstance(obj, tuple(models)) for obj in pending):
            raise OperationalError("INSERT/UPDATE", {}, Exception("database is locked"))

    event.listen(OrmSession, "before_flush", before_flush)
    yield models.append
    event.remove(OrmSession, "before_flush", before_flush)
