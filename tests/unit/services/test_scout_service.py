"""Tests for scout messaging and its entitlement gate."""

from datetime import timedelta

import pytest

from api.services.scout import (
    list_scout_emails,
    read_scout_email,
    reply_scout_email,
    send_scout,
)
from core.errors import Forbidden, NotEntitled, NotFound, ValidationError
from core.utils.datetime import now as utc_now
from database.models import SubscriptionPlan
from tests.factories import company_actor, engineer_actor, make_company, make_engineer


def scout_fields(days=30):
    return {"has_scout_access": True, "scout_access_expiry": utc_now() + timedelta(days=days)}


@pytest.fixture
async def scouting_company(db):
    return await make_company(db, email="hr@scout.example", name="ScoutCo", **scout_fields())


class TestScoutGate:
    """Scouting needs posting entitlement and the scout add-on."""

    @pytest.mark.asyncio
    async def test_trial_without_add_on(self, db, company, engineer):
        with pytest.raises(NotEntitled) as exc_info:
            await send_scout(db, company_actor(company), [engineer.id], "Join us")
        assert exc_info.value.feature == "scout"

    @pytest.mark.asyncio
    async def test_add_on_without_paid_plan(self, db, engineer):
        lapsed = await make_company(
            db, email="hr@lapsed.example", name="Lapsed", trial_days=-1, **scout_fields()
        )
        with pytest.raises(NotEntitled):
            await send_scout(db, company_actor(lapsed), [engineer.id], "Join us")

    @pytest.mark.asyncio
    async def test_expired_add_on(self, db, engineer):
        stale = await make_company(
            db,
            email="hr@stale.example",
            name="Stale",
            subscription_plan=SubscriptionPlan.BASIC,
            subscription_expiry=utc_now() + timedelta(days=10),
            **scout_fields(days=-1),
        )
        with pytest.raises(NotEntitled):
            await send_scout(db, company_actor(stale), [engineer.id], "Join us")

    @pytest.mark.asyncio
    async def test_gate_runs_before_input_checks(self, db, company):
        with pytest.raises(NotEntitled):
            await send_scout(db, company_actor(company), [], "")


class TestSendScout:
    @pytest.mark.asyncio
    async def test_send_to_engineers(self, db, scouting_company, engineer):
        second = await make_engineer(db, email="second@example.com")
        result = await send_scout(
            db,
            company_actor(scouting_company),
            [engineer.id, second.id, engineer.id],
            "  We like your profile  ",
            match_score=0.87,
        )

        assert result["count"] == 2
        assert result["total"] == 2
        assert all(item["success"] for item in result["results"])
        assert all("scout_email_id" in item for item in result["results"])

    @pytest.mark.asyncio
    async def test_unknown_engineer_reported(self, db, scouting_company, engineer):
        result = await send_scout(
            db, company_actor(scouting_company), [engineer.id, 9999], "Hello"
        )

        assert result["count"] == 1
        failed = [item for item in result["results"] if not item["success"]]
        assert failed == [{"engineer_id": 9999, "success": False, "error": "Engineer not found"}]

    @pytest.mark.asyncio
    async def test_default_subject(self, db, scouting_company, engineer):
        await send_scout(db, company_actor(scouting_company), [engineer.id], "Hello")
        inbox = await list_scout_emails(db, engineer_actor(engineer))

        assert inbox["scout_emails"][0]["subject"] == "Scout message from ScoutCo"
        assert inbox["scout_emails"][0]["content"] == "Hello"

    @pytest.mark.asyncio
    async def test_requires_recipients(self, db, scouting_company):
        with pytest.raises(ValidationError):
            await send_scout(db, company_actor(scouting_company), [], "Hello")

    @pytest.mark.asyncio
    async def test_requires_content(self, db, scouting_company, engineer):
        with pytest.raises(ValidationError):
            await send_scout(db, company_actor(scouting_company), [engineer.id], "   ")


class TestReceivedScouts:
    @pytest.fixture
    async def scout_id(self, db, scouting_company, engineer):
        result = await send_scout(
            db, company_actor(scouting_company), [engineer.id], "Hello", subject="Opportunity"
        )
        return result["results"][0]["scout_email_id"]

    @pytest.mark.asyncio
    async def test_listing_counts_unread(self, db, engineer, scouting_company, scout_id):
        inbox = await list_scout_emails(db, engineer_actor(engineer))
        sent = await list_scout_emails(db, company_actor(scouting_company))

        assert inbox["unread_count"] == 1
        assert inbox["scout_emails"][0]["company"]["name"] == "ScoutCo"
        assert len(sent["scout_emails"]) == 1

    @pytest.mark.asyncio
    async def test_read_marks_read(self, db, engineer, scout_id):
        result = await read_scout_email(db, engineer_actor(engineer), scout_id)

        assert result["is_read"] is True
        inbox = await list_scout_emails(db, engineer_actor(engineer))
        assert inbox["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_reply_once(self, db, engineer, scout_id):
        result = await reply_scout_email(db, engineer_actor(engineer), scout_id)
        assert result["is_replied"] is True
        assert result["is_read"] is True

        with pytest.raises(ValidationError):
            await reply_scout_email(db, engineer_actor(engineer), scout_id)

    @pytest.mark.asyncio
    async def test_other_engineer_cannot_open(self, db, scout_id):
        other = await make_engineer(db, email="other@example.com")
        with pytest.raises(NotFound):
            await read_scout_email(db, engineer_actor(other), scout_id)

    @pytest.mark.asyncio
    async def test_company_cannot_reply(self, db, scouting_company, scout_id):
        with pytest.raises(Forbidden):
            await reply_scout_email(db, company_actor(scouting_company), scout_id)
