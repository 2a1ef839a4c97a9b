"""Agent email queueing and delivery task tests."""

import json

import httpx
import pytest
from celery.exceptions import Retry

from fusion_edge.schemas.notification import AgentEmailRequest
from fusion_edge.services.email_service import EmailClient, EmailDeliveryError
from fusion_edge.services.notification_dispatcher import SEND_AGENT_EMAIL_TASK, NotificationDispatcher
from fusion_edge.tasks import notifications as email_tasks

from tests.utils import UnreachableBroker

EMAIL_DATA = {
    "type": "first_order",
    "agentEmail": "agent@example.com",
    "agentName": "Agent Smith",
    "schoolName": "Kilimani School",
    "orderAmount": 100000,
    "commission": 3000,
    "creditWorthFactor": 1.5,
}


class QueuedResult:
    def __init__(self, task_id):
        self.id = task_id


class RecordingCelery:
    """Celery stand-in accepting every message."""

    def __init__(self):
        self.sent = []

    def send_task(self, name, args=None, kwargs=None, **options):
        self.sent.append((name, args))
        return QueuedResult(f"celery-{len(self.sent)}")


@pytest.fixture
def provider_calls():
    return []


@pytest.fixture
def provider_status():
    """HTTP status the fake email provider answers with."""
    return 200


@pytest.fixture
def task_email_client(monkeypatch, provider_calls, provider_status):
    """Point the delivery task at a MockTransport-backed provider."""

    def handler(request: httpx.Request) -> httpx.Response:
        provider_calls.append(request)
        if provider_status == 200:
            return httpx.Response(200, json={"id": "email-1"})
        return httpx.Response(provider_status, json={"message": "provider says no"})

    client = EmailClient("http://email.test", "resend-key", "Fusion <n@example.com>",
                         transport=httpx.MockTransport(handler))
    monkeypatch.setattr(email_tasks, "build_email_client", lambda: client)
    return client


@pytest.fixture
def retries(monkeypatch):
    """Capture retry requests instead of scheduling them."""
    calls = []

    def fake_retry(exc=None, countdown=None, **options):
        calls.append({"exc": exc, "countdown": countdown})
        return Retry(exc=exc, when=countdown)

    monkeypatch.setattr(email_tasks.send_agent_email, "retry", fake_retry)
    return calls


def run_task(attempt=0):
    """Run the task body as the worker would on its ``attempt``-th retry."""
    task = email_tasks.send_agent_email
    task.push_request(retries=attempt)
    try:
        return task.run(dict(EMAIL_DATA))
    finally:
        task.pop_request()


class TestNotificationDispatcher:
    def test_enqueue_returns_task_id(self):
        celery = RecordingCelery()

        task_id = NotificationDispatcher(celery).enqueue_agent_email(AgentEmailRequest.model_validate(EMAIL_DATA))

        assert task_id == "celery-1"
        name, args = celery.sent[0]
        assert name == SEND_AGENT_EMAIL_TASK
        assert args[0]["agentEmail"] == "agent@example.com"
        assert "schoolEmail" not in args[0]

    def test_broker_outage_is_not_raised(self):
        broker = UnreachableBroker()

        task_id = NotificationDispatcher(broker).enqueue_agent_email(AgentEmailRequest.model_validate(EMAIL_DATA))

        assert task_id is None
        assert broker.attempts == 1


class TestSendAgentEmailTask:
    def test_delivers_email(self, task_email_client, provider_calls, retries):
        assert run_task() == {"status": "sent", "id": "email-1"}

        sent = json.loads(provider_calls[0].content)
        assert sent["to"] == ["agent@example.com"]
        assert "TZS 3,000" in sent["html"]
        assert retries == []

    @pytest.mark.parametrize("provider_status", [500, 503, 429])
    def test_provider_outage_is_retried(self, task_email_client, retries, provider_status):
        with pytest.raises(Retry):
            run_task()

        assert len(retries) == 1
        assert retries[0]["countdown"] == 30
        assert isinstance(retries[0]["exc"], EmailDeliveryError)
        assert retries[0]["exc"].retryable is True

    @pytest.mark.parametrize("provider_status", [500])
    def test_retry_backoff_doubles(self, task_email_client, retries, provider_status):
        with pytest.raises(Retry):
            run_task(attempt=3)

        assert retries[0]["countdown"] == 240

    @pytest.mark.parametrize("provider_status", [500])
    def test_gives_up_after_max_retries(self, task_email_client, retries, provider_status):
        with pytest.raises(EmailDeliveryError):
            run_task(attempt=email_tasks.MAX_RETRIES)

        assert retries == []

    @pytest.mark.parametrize("provider_status", [400, 422])
    def test_provider_rejection_fails_without_retry(self, task_email_client, provider_calls, retries,
                                                    provider_status):
        with pytest.raises(EmailDeliveryError) as exc_info:
            run_task()

        assert exc_info.value.retryable is False
        assert str(exc_info.value) == "Email provider error: provider says no"
        assert len(provider_calls) == 1
        assert retries == []

    def test_unreachable_provider_is_retried(self, monkeypatch, retries):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = EmailClient("http://email.test", "resend-key", "Fusion <n@example.com>",
                             transport=httpx.MockTransport(handler))
        monkeypatch.setattr(email_tasks, "build_email_client", lambda: client)

        with pytest.raises(Retry):
            run_task()

        assert retries[0]["exc"].retryable is True
