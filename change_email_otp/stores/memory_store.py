"""In-memory stores for development and tests."""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import uuid4

from change_email_otp.core.errors import VerificationConflictError
from change_email_otp.interfaces.verification_store import VerificationRecord


class MemoryUserDirectory:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_email: dict[str, dict[str, Any]] = {}
        self._users_by_id: dict[str, dict[str, Any]] = {}

    async def create_user(self, data: dict) -> dict:
        async with self._lock:
            payload = dict(data)
            payload["id"] = str(payload.get("id") or uuid4())
            payload["email"] = payload["email"].lower()
            payload.setdefault("email_verified", False)
            self._users_by_email[payload["email"]] = payload
            self._users_by_id[payload["id"]] = payload
            return dict(payload)

    async def get_by_id(self, user_id: str) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(str(user_id))
            return dict(user) if user else None

    async def find_user_by_email(self, email: str) -> dict | None:
        async with self._lock:
            user = self._users_by_email.get(email.lower())
            return dict(user) if user else None

    async def update_user(self, user_id: str, updates: dict) -> dict:
        async with self._lock:
            user = self._users_by_id.get(str(user_id))
            if not user:
                raise ValueError("User not found")
            self._users_by_email.pop(user["email"], None)
            for key, value in updates.items():
                user[key] = value
            self._users_by_email[user["email"]] = user
            return dict(user)


class MemoryVerificationStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._by_id: dict[str, VerificationRecord] = {}
        self._by_identifier: dict[str, str] = {}

    async def create_record(self, identifier: str, value: str, expires_at: datetime) -> VerificationRecord:
        async with self._lock:
            if identifier in self._by_identifier:
                raise VerificationConflictError(identifier)
            record = VerificationRecord(
                id=str(uuid4()),
                identifier=identifier,
                value=value,
                expires_at=expires_at,
            )
            self._by_id[record.id] = record
            self._by_identifier[identifier] = record.id
            return record

    async def find_record(self, identifier: str) -> VerificationRecord | None:
        async with self._lock:
            record_id = self._by_identifier.get(identifier)
            return self._by_id.get(record_id) if record_id else None

    async def update_record(self, record_id: str, value: str) -> None:
        async with self._lock:
            record = self._by_id.get(record_id)
            if record:
                self._by_id[record_id] = replace(record, value=value)

    async def delete_record(self, record_id: str) -> None:
        async with self._lock:
            record = self._by_id.pop(record_id, None)
            if record:
                self._by_identifier.pop(record.identifier, None)

    async def delete_by_identifier(self, identifier: str) -> None:
        async with self._lock:
            record_id = self._by_identifier.pop(identifier, None)
            if record_id:
                self._by_id.pop(record_id, None)


class MemoryRateLimiter:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._hits: dict[str, list[float]] = {}

    def _drop_stale(self, now: float, window_seconds: int) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or (now - hits[-1]) >= window_seconds]
        for key in stale:
            del self._hits[key]

    async def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        async with self._lock:
            self._drop_stale(now, window_seconds)
            hits = self._hits.get(key, [])
            hits = [timestamp for timestamp in hits if (now - timestamp) < window_seconds]
            if len(hits) >= limit:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True
