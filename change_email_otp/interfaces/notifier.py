"""Notifier interface for delivering change-email codes."""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    async def notify(self, email: str, otp: str) -> None:
        ...
