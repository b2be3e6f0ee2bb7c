"""Tests for application messaging, the contact latch and unread counts."""

from datetime import timedelta

import pytest

from api.services.messages import (
    applications_with_unread,
    list_messages,
    post_message,
    unread_total,
)
from core.errors import EmptyContent, Forbidden, NotFound
from core.utils.datetime import now as utc_now
from database.models import SenderType
from tests.factories import (
    company_actor,
    engineer_actor,
    make_application,
    make_company,
    make_engineer,
    make_job,
    make_message,
)


class TestPostMessage:
    """Test posting and the contact permission latch."""

    @pytest.mark.asyncio
    async def test_company_message_does_not_latch(self, db, company, application):
        result = await post_message(db, company_actor(company), application.id, "Hello!")

        assert result["sender_type"] == "COMPANY"
        assert result["content"] == "Hello!"
        assert result["has_contact_permission"] is False

    @pytest.mark.asyncio
    async def test_engineer_message_latches(self, db, engineer, application):
        result = await post_message(db, engineer_actor(engineer), application.id, "Thanks")

        assert result["sender_type"] == "ENGINEER"
        assert result["has_contact_permission"] is True
        await db.refresh(application)
        assert application.has_contact_permission is True

    @pytest.mark.asyncio
    async def test_latch_is_never_cleared(self, db, company, engineer, application):
        await post_message(db, engineer_actor(engineer), application.id, "First")
        result = await post_message(db, company_actor(company), application.id, "Reply")

        assert result["has_contact_permission"] is True

    @pytest.mark.asyncio
    async def test_content_is_trimmed(self, db, company, application):
        result = await post_message(db, company_actor(company), application.id, "  hi  \n")
        assert result["content"] == "hi"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
    async def test_blank_content_rejected(self, db, engineer, application, content):
        with pytest.raises(EmptyContent):
            await post_message(db, engineer_actor(engineer), application.id, content)

        await db.refresh(application)
        assert application.has_contact_permission is False

    @pytest.mark.asyncio
    async def test_outsider_cannot_post(self, db, application):
        stranger = await make_engineer(db, email="stranger@example.com")
        with pytest.raises(Forbidden):
            await post_message(db, engineer_actor(stranger), application.id, "Hi")

    @pytest.mark.asyncio
    async def test_missing_application(self, db, engineer):
        with pytest.raises(NotFound):
            await post_message(db, engineer_actor(engineer), 555, "Hi")


class TestUnreadCounts:
    """Test read markers and unread aggregation."""

    @pytest.mark.asyncio
    async def test_counterpart_messages_are_unread(self, db, company, engineer, application):
        await post_message(db, engineer_actor(engineer), application.id, "One")
        await post_message(db, engineer_actor(engineer), application.id, "Two")

        assert await unread_total(db, company_actor(company)) == 2
        assert await unread_total(db, engineer_actor(engineer)) == 0

    @pytest.mark.asyncio
    async def test_viewing_thread_clears_unread(self, db, company, engineer, application):
        await post_message(db, engineer_actor(engineer), application.id, "One")

        thread = await list_messages(db, company_actor(company), application.id)

        assert thread["first_unread_index"] == 0
        assert [m["content"] for m in thread["messages"]] == ["One"]
        assert await unread_total(db, company_actor(company)) == 0

    @pytest.mark.asyncio
    async def test_new_message_after_viewing_is_unread(self, db, company, engineer, application):
        await list_messages(db, company_actor(company), application.id)
        await make_message(
            db,
            application,
            SenderType.ENGINEER,
            "Later",
            created_at=utc_now() + timedelta(seconds=5),
        )

        assert await unread_total(db, company_actor(company)) == 1

    @pytest.mark.asyncio
    async def test_late_commit_older_than_read_stays_unread(
        self, db, company, engineer, application
    ):
        base = utc_now() - timedelta(minutes=10)
        await make_message(db, application, SenderType.ENGINEER, "Seen", created_at=base)
        await list_messages(db, company_actor(company), application.id)

        # Stamped before the read but committed after it
        await make_message(
            db, application, SenderType.ENGINEER, "Late", created_at=base + timedelta(minutes=1)
        )

        assert await unread_total(db, company_actor(company)) == 1
        thread = await list_messages(db, company_actor(company), application.id)
        assert thread["first_unread_index"] == 1
        assert await unread_total(db, company_actor(company)) == 0

    @pytest.mark.asyncio
    async def test_viewing_empty_thread_keeps_later_messages_unread(
        self, db, company, engineer, application
    ):
        await list_messages(db, company_actor(company), application.id)
        await make_message(
            db,
            application,
            SenderType.ENGINEER,
            "Backdated",
            created_at=utc_now() - timedelta(minutes=5),
        )

        assert await unread_total(db, company_actor(company)) == 1

    @pytest.mark.asyncio
    async def test_marker_never_moves_backwards(self, db, company, engineer, application):
        base = utc_now() - timedelta(hours=1)
        await make_message(db, application, SenderType.ENGINEER, "Newest", created_at=base)
        await list_messages(db, company_actor(company), application.id)
        await make_message(
            db, application, SenderType.ENGINEER, "Older", created_at=base - timedelta(minutes=30)
        )

        thread = await list_messages(db, company_actor(company), application.id)

        assert [m["content"] for m in thread["messages"]] == ["Older", "Newest"]
        assert thread["first_unread_index"] is None
        assert await unread_total(db, company_actor(company)) == 0

    @pytest.mark.asyncio
    async def test_first_unread_index_points_past_read_messages(
        self, db, company, engineer, application
    ):
        base = utc_now() - timedelta(hours=1)
        await make_message(db, application, SenderType.ENGINEER, "Old", created_at=base)
        await list_messages(db, company_actor(company), application.id)
        await make_message(
            db, application, SenderType.COMPANY, "Ours", created_at=utc_now() + timedelta(seconds=1)
        )
        await make_message(
            db, application, SenderType.ENGINEER, "New", created_at=utc_now() + timedelta(seconds=2)
        )

        thread = await list_messages(db, company_actor(company), application.id)

        assert [m["content"] for m in thread["messages"]] == ["Old", "Ours", "New"]
        assert thread["first_unread_index"] == 2

    @pytest.mark.asyncio
    async def test_no_unread_gives_no_index(self, db, company, application):
        thread = await list_messages(db, company_actor(company), application.id)
        assert thread["first_unread_index"] is None

    @pytest.mark.asyncio
    async def test_applications_with_unread(self, db, company, engineer, job):
        second_engineer = await make_engineer(db, email="second@example.com")
        first = await make_application(db, engineer, job=job)
        second = await make_application(db, second_engineer, job=job)
        await make_message(db, first, SenderType.ENGINEER, "a")
        await make_message(db, first, SenderType.ENGINEER, "b")
        await make_message(db, second, SenderType.ENGINEER, "c")
        await make_message(db, second, SenderType.COMPANY, "d")

        inbox = await applications_with_unread(db, company_actor(company))
        counts = {a["id"]: a["unread_count"] for a in inbox["applications"]}

        assert counts == {first.id: 2, second.id: 1}
        assert inbox["total_unread"] == 3

    @pytest.mark.asyncio
    async def test_unread_ignores_other_companies(self, db, company, engineer):
        rival = await make_company(db, email="hr@rival.example", name="Rival")
        rival_job = await make_job(db, rival)
        rival_application = await make_application(db, engineer, job=rival_job)
        await make_message(db, rival_application, SenderType.ENGINEER, "hi rival")

        assert await unread_total(db, company_actor(company)) == 0
        assert await unread_total(db, company_actor(rival)) == 1
