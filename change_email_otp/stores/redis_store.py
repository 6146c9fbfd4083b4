"""Verification records backed by Redis."""

import json
import math
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from redis.asyncio import Redis

from change_email_otp.core.config import settings
from change_email_otp.core.errors import VerificationConflictError
from change_email_otp.interfaces.verification_store import VerificationRecord

_redis_client: Optional[Redis] = None


def get_redis_client() -> Redis:
    """Return a lazily initialized Redis client shared across the service."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client


async def close_redis_client() -> None:
    """Close the shared Redis client; invoked during application shutdown."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def _record_key(identifier: str) -> str:
    return f"verification:{identifier}"


def _id_key(record_id: str) -> str:
    return f"verification-id:{record_id}"


def _dump(record: VerificationRecord) -> str:
    return json.dumps(
        {
            "id": record.id,
            "identifier": record.identifier,
            "value": record.value,
            "expires_at": record.expires_at.isoformat(),
        }
    )


def _load(raw: str) -> VerificationRecord:
    data = json.loads(raw)
    return VerificationRecord(
        id=data["id"],
        identifier=data["identifier"],
        value=data["value"],
        expires_at=datetime.fromisoformat(data["expires_at"]),
    )


class RedisVerificationStore:
    """Stores each record as JSON under its identifier plus an id -> identifier index.

    Keys outlive `expires_at` by `retention_seconds` so an expired challenge is
    still found and reported as expired instead of vanishing.
    """

    def __init__(self, redis_client: Redis, retention_seconds: int = settings.VERIFICATION_RETENTION_SECONDS):
        self.redis = redis_client
        self.retention_seconds = retention_seconds

    def _ttl_seconds(self, expires_at: datetime) -> int:
        remaining = (expires_at - datetime.now(timezone.utc)).total_seconds()
        return max(1, math.ceil(remaining) + self.retention_seconds)

    async def create_record(self, identifier: str, value: str, expires_at: datetime) -> VerificationRecord:
        record = VerificationRecord(id=uuid4().hex, identifier=identifier, value=value, expires_at=expires_at)
        ttl = self._ttl_seconds(expires_at)
        created = await self.redis.set(_record_key(identifier), _dump(record), ex=ttl, nx=True)
        if not created:
            raise VerificationConflictError(identifier)
        await self.redis.set(_id_key(record.id), identifier, ex=ttl)
        return record

    async def find_record(self, identifier: str) -> VerificationRecord | None:
        raw = await self.redis.get(_record_key(identifier))
        return _load(raw) if raw else None

    async def _find_by_id(self, record_id: str) -> VerificationRecord | None:
        identifier = await self.redis.get(_id_key(record_id))
        if identifier is None:
            return None
        record = await self.find_record(identifier)
        if record is None or record.id != record_id:
            return None
        return record

    async def update_record(self, record_id: str, value: str) -> None:
        record = await self._find_by_id(record_id)
        if record is None:
            return
        updated = VerificationRecord(
            id=record.id,
            identifier=record.identifier,
            value=value,
            expires_at=record.expires_at,
        )
        await self.redis.set(_record_key(record.identifier), _dump(updated), keepttl=True, xx=True)

    async def delete_record(self, record_id: str) -> None:
        record = await self._find_by_id(record_id)
        if record is None:
            await self.redis.delete(_id_key(record_id))
            return
        await self.redis.delete(_record_key(record.identifier), _id_key(record_id))

    async def delete_by_identifier(self, identifier: str) -> None:
        record = await self.find_record(identifier)
        if record is None:
            return
        await self.redis.delete(_record_key(identifier), _id_key(record.id))
