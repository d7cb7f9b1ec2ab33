from types import SimpleNamespace

import httpx
import pytest

import eventure.services.tasks as tasks_module
import eventure.services.tasks_internal as tasks_internal
from eventure.core.config import settings
from eventure.services.booking_writer import confirm_booking
from eventure.services.pricing import Quote
from eventure.services.webhook import send_webhook

HOOK_URL = "https://hooks.example.com/bookings"


@pytest.fixture
def webhook_calls(monkeypatch):
    """Route outgoing webhook requests through a mock transport answering with queued status codes."""
    calls = []
    statuses = []
    real_client = httpx.AsyncClient

    def handler(request):
        calls.append(request)
        return httpx.Response(statuses.pop(0) if statuses else 200)

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(settings, "WEBHOOK_URL", HOOK_URL)
    monkeypatch.setattr(httpx, "AsyncClient", client_factory)
    return calls, statuses


class TestWebhook:

    async def test_skipped_without_url(self, monkeypatch):
        monkeypatch.setattr(settings, "WEBHOOK_URL", "")
        assert await send_webhook({"booking_reference": "EVB-1"}) is False

    async def test_delivered(self, webhook_calls):
        calls, _ = webhook_calls

        assert await send_webhook({"booking_reference": "EVB-1"}, retries=1)
        assert len(calls) == 1
        assert str(calls[0].url) == HOOK_URL

    async def test_retries_after_server_error(self, webhook_calls):
        calls, statuses = webhook_calls
        statuses.extend([503, 200])

        assert await send_webhook({"booking_reference": "EVB-1"}, retries=2)
        assert len(calls) == 2

    async def test_gives_up(self, webhook_calls):
        calls, statuses = webhook_calls
        statuses.extend([500])

        assert not await send_webhook({"booking_reference": "EVB-1"}, retries=1)


class TestBookingNotification:

    async def test_payload_describes_booking(self, session_factory, db_session, create_scooter,
                                             create_user, complete_draft, monkeypatch):
        sent = []

        async def fake_send(payload):
            sent.append(payload)
            return True

        monkeypatch.setattr(tasks_internal, "send_webhook", fake_send)
        user = await create_user()
        scooter = await create_scooter()
        quote = Quote(total_hours=1.5, total_amount=150.0, hourly_rate=100.0, valid=True)
        confirmation = await confirm_booking(db_session, complete_draft, quote, "pay_123", scooter.id, user.id)

        await tasks_internal.notify_booking_confirmed_async(confirmation.booking.id, session_factory)

        assert sent[0]["booking_reference"] == confirmation.booking.booking_reference
        assert sent[0]["pickup"] == "2024-01-01 10:00"
        assert sent[0]["dropoff"] == "2024-01-01 11:10"
        assert sent[0]["total_amount"] == 150.0
        assert sent[0]["status"] == "confirmed"

    async def test_undelivered_raises_for_retry(self, session_factory, db_session, create_scooter,
                                                create_user, complete_draft, monkeypatch):
        async def failing_send(payload):
            return False

        monkeypatch.setattr(tasks_internal, "send_webhook", failing_send)
        user = await create_user()
        scooter = await create_scooter()
        quote = Quote(total_hours=1.5, total_amount=150.0, hourly_rate=100.0, valid=True)
        confirmation = await confirm_booking(db_session, complete_draft, quote, "pay_123", scooter.id, user.id)

        with pytest.raises(tasks_internal.NotificationNotDelivered):
            await tasks_internal.notify_booking_confirmed_async(confirmation.booking.id, session_factory)

    async def test_missing_booking_is_ignored(self, session_factory, monkeypatch):
        async def fake_send(payload):
            raise AssertionError("nothing should be sent")

        monkeypatch.setattr(tasks_internal, "send_webhook", fake_send)
        await tasks_internal.notify_booking_confirmed_async(999, session_factory)

    def test_enqueue_skipped_without_url(self, monkeypatch):
        queued = []
        monkeypatch.setattr(settings, "WEBHOOK_URL", "")
        monkeypatch.setattr(tasks_module, "notify_booking_confirmed", SimpleNamespace(delay=queued.append))

        tasks_module.enqueue_booking_notification(1)
        assert queued == []

    def test_enqueue_with_url(self, monkeypatch):
        queued = []
        monkeypatch.setattr(settings, "WEBHOOK_URL", HOOK_URL)
        monkeypatch.setattr(tasks_module, "notify_booking_confirmed", SimpleNamespace(delay=queued.append))

        tasks_module.enqueue_booking_notification(7)
        assert queued == [7]

    def test_enqueue_failure_does_not_raise(self, monkeypatch):
        def broken_delay(booking_id):
            raise ConnectionError("broker unreachable")

        monkeypatch.setattr(settings, "WEBHOOK_URL", HOOK_URL)
        monkeypatch.setattr(tasks_module, "notify_booking_confirmed", SimpleNamespace(delay=broken_delay))

        tasks_module.enqueue_booking_notification(7)
