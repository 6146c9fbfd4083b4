"""SQLAlchemy-backed user directory and verification store."""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from change_email_otp.core.errors import VerificationConflictError
from change_email_otp.db.models import User, Verification
from change_email_otp.interfaces.verification_store import VerificationRecord


def _to_record(row: Verification) -> VerificationRecord:
    return VerificationRecord(
        id=row.id,
        identifier=row.identifier,
        value=row.value,
        expires_at=row.expires_at,
    )


class SqlUserDirectory:
    """User lookups and updates over the `users` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_user_by_email(self, email: str) -> dict | None:
        user = await self.session.scalar(select(User).where(User.email == email.lower()))
        return user.to_dict() if user else None

    async def update_user(self, user_id: str, updates: dict) -> dict:
        user = await self.session.get(User, user_id)
        if user is None:
            raise ValueError("User not found")
        for key, value in updates.items():
            setattr(user, key, value)
        await self.session.commit()
        await self.session.refresh(user)
        return user.to_dict()


class SqlVerificationStore:
    """Verification records over the `verifications` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_record(self, identifier: str, value: str, expires_at: datetime) -> VerificationRecord:
        row = Verification(identifier=identifier, value=value, expires_at=expires_at)
        self.session.add(row)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise VerificationConflictError(identifier) from exc
        await self.session.refresh(row)
        return _to_record(row)

    async def find_record(self, identifier: str) -> VerificationRecord | None:
        row = await self.session.scalar(select(Verification).where(Verification.identifier == identifier))
        return _to_record(row) if row else None

    async def update_record(self, record_id: str, value: str) -> None:
        await self.session.execute(update(Verification).where(Verification.id == record_id).values(value=value))
        await self.session.commit()

    async def delete_record(self, record_id: str) -> None:
        await self.session.execute(delete(Verification).where(Verification.id == record_id))
        await self.session.commit()

    async def delete_by_identifier(self, identifier: str) -> None:
        await self.session.execute(delete(Verification).where(Verification.identifier == identifier))
        await self.session.commit()
