"""Tests for the Redis verification store."""

from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
import pytest_asyncio

from change_email_otp.core.errors import InvalidOtp, OtpExpired, VerificationConflictError
from change_email_otp.services.change_email import ChangeEmailOTPService
from change_email_otp.services.otp import decode_value, encode_value, otp_identifier
from change_email_otp.stores.redis_store import RedisVerificationStore

pytestmark = pytest.mark.asyncio

NEW_EMAIL = "new@example.com"
IDENTIFIER = otp_identifier(NEW_EMAIL)
RECORD_KEY = f"verification:{IDENTIFIER}"
RETENTION = 3600


@pytest_asyncio.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def store(redis_client):
    return RedisVerificationStore(redis_client, retention_seconds=RETENTION)


@pytest.fixture
def redis_service(users, store, notifier, options):
    return ChangeEmailOTPService(users=users, verifications=store, notifier=notifier, options=options)


def _in(minutes: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


async def test_create_and_find(store, redis_client):
    created = await store.create_record(IDENTIFIER, "123456:0", _in(5))

    found = await store.find_record(IDENTIFIER)
    assert found == created
    assert await redis_client.get(f"verification-id:{created.id}") == IDENTIFIER
    ttl = await redis_client.ttl(RECORD_KEY)
    assert 5 * 60 + RETENTION - 5 <= ttl <= 5 * 60 + RETENTION + 1


async def test_second_create_conflicts(store):
    await store.create_record(IDENTIFIER, "111111:0", _in(5))

    with pytest.raises(VerificationConflictError):
        await store.create_record(IDENTIFIER, "222222:0", _in(5))
    assert (await store.find_record(IDENTIFIER)).value == "111111:0"


async def test_update_keeps_ttl(store, redis_client):
    record = await store.create_record(IDENTIFIER, "123456:0", _in(5))
    await redis_client.expire(RECORD_KEY, 100)

    await store.update_record(record.id, "123456:1")

    assert (await store.find_record(IDENTIFIER)).value == "123456:1"
    assert 0 < await redis_client.ttl(RECORD_KEY) <= 100


async def test_update_of_replaced_record_is_ignored(store):
    old = await store.create_record(IDENTIFIER, "111111:0", _in(5))
    await store.delete_by_identifier(IDENTIFIER)
    await store.create_record(IDENTIFIER, "222222:0", _in(5))

    await store.update_record(old.id, "111111:1")
    assert (await store.find_record(IDENTIFIER)).value == "222222:0"


async def test_delete_record_removes_both_keys(store, redis_client):
    record = await store.create_record(IDENTIFIER, "123456:0", _in(5))

    await store.delete_record(record.id)

    assert await redis_client.keys("*") == []
    assert await store.find_record(IDENTIFIER) is None


async def test_delete_by_identifier_removes_both_keys(store, redis_client):
    await store.create_record(IDENTIFIER, "123456:0", _in(5))

    await store.delete_by_identifier(IDENTIFIER)

    assert await redis_client.keys("*") == []
    await store.create_record(IDENTIFIER, "654321:0", _in(5))


async def test_service_flow_over_redis(redis_service, session, users, redis_client, notifier):
    await redis_service.send_change_email_otp(session, NEW_EMAIL)
    await redis_service.send_change_email_otp(session, NEW_EMAIL)
    assert len(await redis_client.keys("verification:*")) == 1
    assert len(await redis_client.keys("verification-id:*")) == 1

    code = notifier.last_otp
    wrong = "".join(str((int(digit) + 1) % 10) for digit in code)
    with pytest.raises(InvalidOtp):
        await redis_service.verify_change_email_otp(session, NEW_EMAIL, wrong)
    raw = await redis_client.get(RECORD_KEY)
    assert raw is not None
    assert decode_value((await redis_service.verifications.find_record(IDENTIFIER)).value).attempts == 1

    await redis_service.verify_change_email_otp(session, NEW_EMAIL, code)
    assert await redis_client.keys("*") == []
    assert (await users.get_by_id(session.user.id))["email"] == NEW_EMAIL

    with pytest.raises(InvalidOtp):
        await redis_service.verify_change_email_otp(session, NEW_EMAIL, code)


async def test_expired_record_is_retained_and_reports_expired(redis_service, store, session, redis_client):
    await store.create_record(IDENTIFIER, encode_value("123456", 0), _in(-1))

    assert await redis_client.ttl(RECORD_KEY) > 0
    with pytest.raises(OtpExpired):
        await redis_service.verify_change_email_otp(session, NEW_EMAIL, "123456")
    assert await store.find_record(IDENTIFIER) is not None
