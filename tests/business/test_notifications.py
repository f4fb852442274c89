"""Admin notification tests."""
import json

import httpx
import pytest

from business.exceptions import ValidationError
from business.notifications import AdminNotifier, render_admin_message


class TestAdminNotifier:
    """Tests for AdminNotifier."""

    def test_posts_type_and_data(self):
        received = []

        def handler(request):
            received.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        notifier = AdminNotifier(url="https://admin.test/notify", client=client, background=False)
        notifier.notify("new_business", {"business_name": "Test"})
        assert received == [{"type": "new_business", "data": {"business_name": "Test"}}]

    def test_skips_without_url(self):
        def handler(request):
            raise AssertionError("should not be called")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        AdminNotifier(url="", client=client, background=False).notify("new_business", {})

    def test_errors_are_swallowed(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        AdminNotifier(url="https://admin.test/notify", client=client,
                      background=False).notify("plan_upgrade", {})


class TestRenderAdminMessage:
    """Tests for render_admin_message."""

    def test_new_business(self):
        subject, body = render_admin_message("new_business", {
            "business_name": "Barbería", "category": "beauty_wellness", "city": "Tegucigalpa",
        })
        assert subject == "Nuevo negocio: Barbería"
        assert "Ciudad: Tegucigalpa" in body
        assert "Teléfono: -" in body

    def test_plan_upgrade(self):
        subject, body = render_admin_message("plan_upgrade", {
            "business_name": "Barbería", "new_plan": "vip", "old_plan": "premium",
        })
        assert subject == "Plan VIP asignado a Barbería"
        assert "Plan anterior: PREMIUM" in body

    def test_collaborator_request(self):
        subject, _ = render_admin_message("new_collaborator_request", {"name": "Ana"})
        assert subject == "Nueva solicitud de colaborador: Ana"

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            render_admin_message("spam", {})
