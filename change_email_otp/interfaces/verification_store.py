"""Verification store interface.

A generic keyed store of short-lived values. ``create_record`` raises
``VerificationConflictError`` when the identifier already holds a record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class VerificationRecord:
    id: str
    identifier: str
    value: str
    expires_at: datetime


class VerificationStore(Protocol):
    async def create_record(self, identifier: str, value: str, expires_at: datetime) -> VerificationRecord:
        ...

    async def find_record(self, identifier: str) -> VerificationRecord | None:
        ...

    async def update_record(self, record_id: str, value: str) -> None:
        ...

    async def delete_record(self, record_id: str) -> None:
        ...

    async def delete_by_identifier(self, identifier: str) -> None:
        ...
