"""Trial period tests.

Tests for:
- get_trial_status: CRM override, legacy accounts, in-trial, last day, expired
- snake_case / camelCase plan data
- new_business_plan_data, format_days_left
- TrialService against the database
"""
from datetime import datetime, timedelta, timezone

import pytest

from business.exceptions import NotFoundError
from business.trial import (
    TRIAL_DAYS, TrialService, format_days_left, get_trial_status, new_business_plan_data,
)
from tests.conftest import make_business

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _account(**plan_data):
    return {"plan_data": plan_data}


class TestGetTrialStatus:
    """Tests for get_trial_status."""

    def test_crm_override_skips_trial(self):
        status = get_trial_status(_account(overridden_by_crm=True))
        assert status.overridden_by_crm is True
        assert status.is_expired is False
        assert status.is_in_trial is False
        assert status.days_left == TRIAL_DAYS

    def test_missing_start_date_is_expired(self):
        status = get_trial_status(_account(plan="premium"))
        assert status.is_expired is True
        assert status.days_left == 0
        assert status.days_used == TRIAL_DAYS

    def test_missing_business_is_expired(self):
        assert get_trial_status(None).is_expired is True

    def test_in_trial(self):
        status = get_trial_status(_account(trial_start_date=START.isoformat()),
                                  now=START + timedelta(days=3))
        assert status.is_in_trial is True
        assert status.days_left == 4
        assert status.days_used == 3
        assert status.trial_end_date == START + timedelta(days=7)
        assert status.show_reminder_banner is False

    def test_last_day_shows_reminder(self):
        status = get_trial_status(_account(trial_start_date=START.isoformat()),
                                  now=START + timedelta(days=6, hours=1))
        assert status.days_left == 1
        assert status.show_reminder_banner is True
        assert status.is_in_trial is True

    def test_exactly_six_days_in_leaves_one_day(self):
        status = get_trial_status(_account(trial_start_date=START.isoformat()),
                                  now=START + timedelta(days=6))
        assert status.days_left == 1
        assert status.days_used == 6
        assert status.show_reminder_banner is True
        assert status.is_expired is False

    def test_expired_at_end(self):
        status = get_trial_status(_account(trial_start_date=START.isoformat()),
                                  now=START + timedelta(days=7))
        assert status.is_expired is True
        assert status.days_left == 0
        assert status.show_urgent_banner is False

    def test_camel_case_plan_data(self):
        status = get_trial_status({"planData": {"trialStartDate": "2024-03-01T12:00:00Z"}},
                                  now=START + timedelta(days=1))
        assert status.days_left == 6

    def test_naive_start_date_treated_as_utc(self):
        status = get_trial_status(_account(trial_start_date="2024-03-01T12:00:00"),
                                  now=START + timedelta(days=2))
        assert status.days_left == 5

    def test_to_dict_serializes_end_date(self):
        status = get_trial_status(_account(trial_start_date=START.isoformat()), now=START)
        data = status.to_dict()
        assert data["trial_end_date"].startswith("2024-03-08")
        assert data["days_left"] == 7


class TestHelpers:
    """Tests for plan data defaults and formatting."""

    def test_new_business_plan_data(self):
        data = new_business_plan_data(START)
        assert data["plan"] == "premium"
        assert data["plan_status"] == "trial"
        assert data["team_member_limit"] == 5
        assert data["overridden_by_crm"] is False
        assert data["trial_end_date"].startswith("2024-03-08")

    @pytest.mark.parametrize("days, expected", [
        (0, "Hoy es el último día"),
        (1, "1 día restante"),
        (5, "5 días restantes"),
    ])
    def test_format_days_left(self, days, expected):
        assert format_days_left(days) == expected


class TestTrialService:
    """Tests for TrialService."""

    def test_get_status_for_missing_business(self, temp_db):
        assert TrialService(temp_db).get_status("missing") is None

    def test_get_status(self, temp_db):
        make_business(temp_db, "b1")
        temp_db.profiles.set_plan_data("b1", new_business_plan_data(START))
        status = TrialService(temp_db).get_status("b1", now=START + timedelta(days=2))
        assert status.days_left == 5

    def test_activate_plan_merges_plan_data(self, temp_db):
        make_business(temp_db, "b1")
        temp_db.profiles.set_plan_data("b1", new_business_plan_data(START))
        TrialService(temp_db).activate_plan("b1", "plus_team", 5)

        plan_data = temp_db.get_account("b1")["plan_data"]
        assert plan_data["plan"] == "plus_team"
        assert plan_data["plan_status"] == "active"
        assert plan_data["plan_source"] == "self_serve"
        assert plan_data["trial_start_date"] == START.isoformat()
        assert "activated_at" in plan_data

    def test_activate_plan_missing_business(self, temp_db):
        with pytest.raises(NotFoundError):
            TrialService(temp_db).activate_plan("missing", "premium", 0)
