from __future__ import annotations

import asyncio
import threading
from unittest import TestCase
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from headshots.main import app
from headshots.modules.notifications.routes import get_notification_service
from headshots.modules.notifications.service import (
    TRAINING_SUBJECT, NotificationService, render_training_email
)


class TrainingEmailTests(TestCase):
    def test_user_name_and_tune_id_are_escaped(self) -> None:
        body = render_training_email("<tune>", "https://headshots.test", "<b>Eve</b>")

        self.assertIn("Great news, &lt;b&gt;Eve&lt;/b&gt;!", body)
        self.assertIn("<code>&lt;tune&gt;</code>", body)
        self.assertIn('href="https://headshots.test"', body)

    def test_greeting_without_name(self) -> None:
        self.assertIn("<h1>Great news!</h1>", render_training_email("1", "https://headshots.test"))

    def test_send_builds_resend_params(self) -> None:
        service = NotificationService(api_key="re_test", sender="Team <team@headshots.test>", site_url="https://headshots.test")

        with patch("resend.Emails.send", return_value={"id": "email-1"}) as send:
            result = asyncio.run(service.send_training_notification("alice@example.com", "777", "Alice"))

        self.assertEqual({"id": "email-1"}, result)
        params = send.call_args.args[0]
        self.assertEqual("Team <team@headshots.test>", params["from"])
        self.assertEqual(["alice@example.com"], params["to"])
        self.assertEqual(TRAINING_SUBJECT, params["subject"])
        self.assertIn("777", params["html"])

    def test_missing_key_is_server_error(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            asyncio.run(NotificationService(api_key="").send_training_notification("alice@example.com", "777"))

        self.assertEqual(500, ctx.exception.status_code)

    def test_provider_failure_is_bad_gateway(self) -> None:
        service = NotificationService(api_key="re_test")

        with patch("resend.Emails.send", side_effect=RuntimeError("domain not verified")):
            with self.assertRaises(HTTPException) as ctx:
                asyncio.run(service.send_training_notification("alice@example.com", "777"))

        self.assertEqual(502, ctx.exception.status_code)

    def test_send_runs_off_the_event_loop_thread(self) -> None:
        service = NotificationService(api_key="re_test")
        threads = {}

        def send(params):
            threads["send"] = threading.get_ident()
            return {"id": "email-3"}

        async def scenario():
            threads["loop"] = threading.get_ident()
            return await service.send_training_notification("alice@example.com", "777")

        with patch("resend.Emails.send", side_effect=send):
            result = asyncio.run(scenario())

        self.assertEqual({"id": "email-3"}, result)
        self.assertNotEqual(threads["loop"], threads["send"])


@pytest.fixture
def notifier(client):
    service = NotificationService(api_key="re_test", site_url="https://headshots.test")
    app.dependency_overrides[get_notification_service] = lambda: service
    return service


def test_send_training_notification_route(client, alice_headers, notifier):
    with patch("resend.Emails.send", return_value={"id": "email-2"}) as send:
        response = client.post("/api/v1/send-training-notification", json={
            "email": "alice@example.com", "tuneId": "777", "userName": "Alice",
        }, headers=alice_headers)

    assert response.status_code == 200
    assert response.json() == {"id": "email-2"}
    assert send.call_count == 1


def test_send_training_notification_rejects_bad_email(client, alice_headers, notifier):
    with patch("resend.Emails.send") as send:
        response = client.post("/api/v1/send-training-notification", json={
            "email": "not-an-address", "tuneId": "777",
        }, headers=alice_headers)

    assert response.status_code == 422
    send.assert_not_called()
