"""Audit log service tests."""
from business.audit import AuditLogService


def _entry(**overrides):
    entry = {"action": "business.suspended", "actor_uid": "admin-1",
             "target_id": "b1", "target_type": "business", "country": "HN"}
    entry.update(overrides)
    return entry


class TestAuditLogService:
    """Tests for AuditLogService."""

    def test_log_and_list(self, temp_db):
        audit = AuditLogService(temp_db)
        assert audit.log(_entry()) > 0
        entries = audit.list_entries()
        assert entries[0]["action"] == "business.suspended"

    def test_log_failure_returns_none(self, temp_db):
        audit = AuditLogService(temp_db)
        # missing required actor_uid
        assert audit.log({"action": "business.created"}) is None

    def test_country_all_disables_filter(self, temp_db):
        audit = AuditLogService(temp_db)
        audit.log(_entry(country="HN"))
        audit.log(_entry(country="GT"))
        assert len(audit.list_entries(country="ALL")) == 2
        assert len(audit.list_entries(country="GT")) == 1

    def test_listener_called_immediately_and_on_append(self, temp_db):
        audit = AuditLogService(temp_db)
        audit.log(_entry())
        calls = []
        unsubscribe = audit.on_entries({"target_type": "business"}, calls.append)
        assert len(calls) == 1
        assert len(calls[0]) == 1

        audit.log(_entry(target_id="b2"))
        assert len(calls) == 2
        assert len(calls[1]) == 2

        unsubscribe()
        audit.log(_entry(target_id="b3"))
        assert len(calls) == 2

    def test_listener_filters(self, temp_db):
        audit = AuditLogService(temp_db)
        calls = []
        audit.on_entries({"actor_uid": "admin-2", "limit": 5}, calls.append)
        audit.log(_entry())
        audit.log(_entry(actor_uid="admin-2"))
        assert [len(c) for c in calls] == [0, 0, 1]

    def test_listener_errors_do_not_propagate(self, temp_db):
        audit = AuditLogService(temp_db)

        def broken(entries):
            raise RuntimeError("listener failed")

        audit.on_entries(None, broken)
        assert audit.log(_entry()) is not None

    def test_label_for(self):
        assert AuditLogService.label_for("business.created") == "Negocio creado"
        assert AuditLogService.label_for("custom.action") == "custom.action"
