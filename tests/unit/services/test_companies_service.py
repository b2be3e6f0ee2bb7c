"""Tests for company profile, dashboard, postings and engineer profile access."""

from datetime import timedelta

import pytest

from api.services.companies import (
    get_company_profile,
    get_dashboard,
    get_subscription_status,
    update_company_profile,
)
from api.services.engineers import get_engineer_profile
from api.services.messages import post_message
from api.services.postings import create_job, create_project, list_jobs, list_projects
from core.errors import Forbidden, NotEntitled, NotFound
from core.utils.datetime import now as utc_now
from database.models import ScoutEmail, SubscriptionPlan
from tests.factories import (
    company_actor,
    engineer_actor,
    make_application,
    make_company,
    make_engineer,
    make_job,
    make_project,
)


@pytest.fixture
async def expired_company(db):
    return await make_company(db, email="hr@lapsed.example", name="Lapsed", trial_days=-3)


class TestCompanyProfile:
    @pytest.mark.asyncio
    async def test_profile_includes_entitlements(self, db, company):
        profile = await get_company_profile(db, company_actor(company))

        assert profile["name"] == "Acme"
        assert profile["entitlements"]["can_access_paid_features"] is True
        assert profile["entitlements"]["trial_status"]["is_active"] is True
        assert profile["trial_message"]["type"] == "success"

    @pytest.mark.asyncio
    async def test_expired_trial_banner(self, db, expired_company):
        profile = await get_company_profile(db, company_actor(expired_company))

        assert profile["entitlements"]["trial_status"]["has_expired"] is True
        assert profile["trial_message"]["type"] == "error"

    @pytest.mark.asyncio
    async def test_update_ignores_subscription_fields(self, db, expired_company):
        profile = await update_company_profile(
            db,
            company_actor(expired_company),
            {"website": "https://lapsed.example", "subscription_plan": "ENTERPRISE"},
        )

        assert profile["website"] == "https://lapsed.example"
        assert expired_company.subscription_plan == SubscriptionPlan.FREE

    @pytest.mark.asyncio
    async def test_update_refreshes_stale_trial_hint(self, db):
        stale = await make_company(
            db, email="hr@stale.example", name="Stale", trial_days=-1, is_trial_active=True
        )
        await update_company_profile(db, company_actor(stale), {"industry": "Fintech"})

        assert stale.is_trial_active is False
        assert stale.industry == "Fintech"

    @pytest.mark.asyncio
    async def test_subscription_status(self, db, company, expired_company, engineer):
        assert await get_subscription_status(db, company_actor(company)) == {"is_active": True}
        assert await get_subscription_status(db, company_actor(expired_company)) == {
            "is_active": False
        }
        assert await get_subscription_status(db, engineer_actor(engineer)) == {"is_active": False}
        assert await get_subscription_status(db, None) == {"is_active": False}


class TestDashboard:
    @pytest.mark.asyncio
    async def test_dashboard_counts(self, db, company, engineer, job):
        project = await make_project(db, company)
        second = await make_engineer(db, email="second@example.com")
        application = await make_application(db, engineer, job=job)
        await make_application(db, second, job=job)
        await make_application(db, engineer, project=project)
        await post_message(db, engineer_actor(engineer), application.id, "Hello")

        rival = await make_company(db, email="hr@rival.example", name="Rival")
        await make_application(db, second, job=await make_job(db, rival))

        dashboard = await get_dashboard(db, company_actor(company))

        assert [j["application_count"] for j in dashboard["jobs"]] == [2]
        assert [p["application_count"] for p in dashboard["projects"]] == [1]
        assert len(dashboard["applications"]) == 3
        assert dashboard["total_unread"] == 1
        assert dashboard["entitlements"]["can_access_paid_features"] is True


class TestPostings:
    @pytest.mark.asyncio
    async def test_trial_company_posts_job(self, db, company):
        job = await create_job(
            db, company_actor(company), "Go Engineer", "Services", salary_min=5, salary_max=9
        )
        assert job["is_active"] is True

    @pytest.mark.asyncio
    async def test_paid_plan_posts_after_trial(self, db):
        paid = await make_company(
            db,
            email="hr@paid.example",
            name="Paid",
            trial_days=-10,
            subscription_plan=SubscriptionPlan.BASIC,
            subscription_expiry=utc_now() + timedelta(days=20),
        )
        project = await create_project(db, company_actor(paid), "ERP", "Migration")
        assert project["title"] == "ERP"

    @pytest.mark.asyncio
    async def test_expired_company_cannot_post(self, db, expired_company):
        with pytest.raises(NotEntitled) as exc_info:
            await create_job(db, company_actor(expired_company), "Role", "Desc")
        assert exc_info.value.feature == "job_posting"

        with pytest.raises(NotEntitled):
            await create_project(db, company_actor(expired_company), "Project", "Desc")

    @pytest.mark.asyncio
    async def test_list_only_active(self, db, company):
        await make_job(db, company, title="Open")
        await make_job(db, company, title="Closed", is_active=False)
        await make_project(db, company)

        jobs = await list_jobs(db)
        projects = await list_projects(db)

        assert [j["title"] for j in jobs["jobs"]] == ["Open"]
        assert jobs["total"] == 1
        assert projects["total"] == 1


class TestEngineerProfileAccess:
    @pytest.mark.asyncio
    async def test_engineer_sees_own_profile(self, db, engineer):
        profile = await get_engineer_profile(db, engineer_actor(engineer), engineer.id)
        assert profile["phone_number"] == "+81-90-1234-5678"

    @pytest.mark.asyncio
    async def test_engineer_cannot_view_others(self, db, engineer):
        other = await make_engineer(db, email="other@example.com")
        with pytest.raises(Forbidden):
            await get_engineer_profile(db, engineer_actor(engineer), other.id)

    @pytest.mark.asyncio
    async def test_company_without_contact_sees_redacted(self, db, company, engineer):
        profile = await get_engineer_profile(db, company_actor(company), engineer.id)

        assert profile["name"] == "Kenji Sato"
        assert profile["phone_number"] is None
        assert profile["has_contact_permission"] is False

    @pytest.mark.asyncio
    async def test_company_with_latched_application(self, db, company, engineer, application):
        await post_message(db, engineer_actor(engineer), application.id, "Hi")

        profile = await get_engineer_profile(db, company_actor(company), engineer.id)

        assert profile["phone_number"] == "+81-90-1234-5678"
        assert profile["email"] == "dev@example.com"

    @pytest.mark.asyncio
    async def test_company_with_replied_scout(self, db, company, engineer):
        db.add(ScoutEmail(
            company_id=company.id,
            engineer_id=engineer.id,
            subject="Hi",
            content="Join us",
            is_replied=True,
        ))
        await db.commit()

        profile = await get_engineer_profile(db, company_actor(company), engineer.id)
        assert profile["has_contact_permission"] is True

    @pytest.mark.asyncio
    async def test_latch_on_other_company_does_not_leak(self, db, company, engineer, application):
        await post_message(db, engineer_actor(engineer), application.id, "Hi")
        paid_rival = await make_company(db, email="hr@rival.example", name="Rival")

        profile = await get_engineer_profile(db, company_actor(paid_rival), engineer.id)
        assert profile["phone_number"] is None

    @pytest.mark.asyncio
    async def test_expired_company_not_entitled(self, db, expired_company, engineer):
        with pytest.raises(NotEntitled):
            await get_engineer_profile(db, company_actor(expired_company), engineer.id)

    @pytest.mark.asyncio
    async def test_unknown_engineer(self, db, company):
        with pytest.raises(NotFound):
            await get_engineer_profile(db, company_actor(company), 31337)
