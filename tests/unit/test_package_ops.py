"""Unit tests for package grants."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from libs.common.datetime_utils import ensure_utc
from services.bookings_service.errors import PackageNotFound
from services.bookings_service.models import PackageStatus, PurchasedPackage
from services.bookings_service.services.package_ops import grant_package
from sqlalchemy import func, select
from tests.factories import SessionPackageFactory

USER_ID = "member-grant-user"
NOW = datetime(2030, 3, 1, 10, 0, tzinfo=timezone.utc)


async def _seed_definition(db, **overrides):
    definition = SessionPackageFactory.create(**overrides)
    db.add(definition)
    await db.commit()
    return definition


async def _package_count(db):
    result = await db.execute(select(func.count()).select_from(PurchasedPackage))
    return result.scalar_one()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_grant_takes_sessions_and_expiry_from_definition(db_session):
    definition = await _seed_definition(
        db_session, session_count=10, validity_days=180
    )

    package = await grant_package(
        db_session,
        user_id=USER_ID,
        session_package_id=definition.id,
        stripe_payment_id="pi_grant_1",
        now=NOW,
    )

    assert package.user_id == USER_ID
    assert package.package_id == definition.id
    assert package.sessions_total == 10
    assert package.sessions_remaining == 10
    assert package.status == PackageStatus.ACTIVE
    assert package.stripe_payment_id == "pi_grant_1"
    assert ensure_utc(package.purchased_at) == NOW
    assert ensure_utc(package.expires_at) == NOW + timedelta(days=180)
    assert package.is_usable(NOW)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_grant_unknown_package_rejected(db_session):
    with pytest.raises(PackageNotFound):
        await grant_package(
            db_session, user_id=USER_ID, session_package_id=uuid.uuid4()
        )
    assert await _package_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_grant_inactive_package_rejected(db_session):
    definition = await _seed_definition(db_session, is_active=False)

    with pytest.raises(PackageNotFound):
        await grant_package(
            db_session, user_id=USER_ID, session_package_id=definition.id
        )
    assert await _package_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_grant_is_idempotent_per_payment(db_session):
    definition = await _seed_definition(db_session)

    first = await grant_package(
        db_session,
        user_id=USER_ID,
        session_package_id=definition.id,
        stripe_payment_id="pi_repeat",
    )
    second = await grant_package(
        db_session,
        user_id=USER_ID,
        session_package_id=definition.id,
        stripe_payment_id="pi_repeat",
    )

    assert second.id == first.id
    assert await _package_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_grants_without_payment_are_separate(db_session):
    definition = await _seed_definition(db_session, session_count=3)

    first = await grant_package(
        db_session, user_id=USER_ID, session_package_id=definition.id
    )
    second = await grant_package(
        db_session, user_id=USER_ID, session_package_id=definition.id
    )

    assert first.id != second.id
    assert await _package_count(db_session) == 2
