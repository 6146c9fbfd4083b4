"""User directory interface."""

from __future__ import annotations

from typing import Protocol


class UserDirectory(Protocol):
    async def find_user_by_email(self, email: str) -> dict | None:
        ...

    async def update_user(self, user_id: str, updates: dict) -> dict:
        ...
