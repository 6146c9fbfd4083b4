"""Change-email OTP flow: issue a code to the new address, then confirm it."""

import logging

from change_email_otp.core.config import OTPOptions
from change_email_otp.core.errors import (
    EmailAlreadyExists,
    InvalidOtp,
    OtpExpired,
    TooManyAttempts,
    Unauthenticated,
    VerificationConflictError,
)
from change_email_otp.interfaces import Notifier, UserDirectory, VerificationStore
from change_email_otp.schemas.auth import AuthSession
from change_email_otp.services.otp import (
    compute_expiry,
    decode_value,
    encode_value,
    generate_otp,
    is_expired,
    normalize_email,
    otp_identifier,
)

logger = logging.getLogger(__name__)


class ChangeEmailOTPService:
    """Used by the API routes; holds the stores, the notifier, and the OTP policy."""

    def __init__(
        self,
        users: UserDirectory,
        verifications: VerificationStore,
        notifier: Notifier,
        options: OTPOptions,
    ):
        self.users = users
        self.verifications = verifications
        self.notifier = notifier
        self.options = options

    async def send_change_email_otp(self, session: AuthSession | None, email: str) -> None:
        """Issue a code for `email` and hand it to the notifier.

        Any pending code for the same address is replaced. If the notifier
        fails the stored code stays valid, so the caller can simply retry.
        """

        if session is None:
            raise Unauthenticated()

        email = normalize_email(email)
        if await self.users.find_user_by_email(email):
            raise EmailAlreadyExists()

        otp = generate_otp(self.options.length)
        identifier = otp_identifier(email)
        expires_at = compute_expiry(self.options.expiration_minutes)
        value = encode_value(otp, 0)

        try:
            await self.verifications.create_record(identifier, value, expires_at)
        except VerificationConflictError:
            logger.warning("Replacing pending change-email OTP for user %s", session.user.id)
            await self.verifications.delete_by_identifier(identifier)
            await self.verifications.create_record(identifier, value, expires_at)

        logger.info("Change-email OTP issued for user %s", session.user.id)
        await self.notifier.notify(email, otp)

    async def verify_change_email_otp(self, session: AuthSession | None, email: str, otp: str) -> None:
        """Check `otp` against the pending record and move the caller to `email`.

        Checks run in a fixed order: record exists, not expired, attempts
        left, code matches.
        """

        if session is None:
            raise Unauthenticated()

        email = normalize_email(email)
        record = await self.verifications.find_record(otp_identifier(email))
        if record is None:
            raise InvalidOtp()
        if is_expired(record.expires_at):
            raise OtpExpired()

        challenge = decode_value(record.value)
        max_attempts = self.options.max_attempts

        if challenge.attempts >= max_attempts:
            await self.verifications.delete_record(record.id)
            logger.warning("Change-email OTP for user %s exhausted its attempts", session.user.id)
            raise TooManyAttempts()

        if challenge.code != otp:
            attempts = challenge.attempts + 1
            if attempts >= max_attempts:
                await self.verifications.delete_record(record.id)
                logger.warning("Change-email OTP for user %s exhausted its attempts", session.user.id)
                raise TooManyAttempts()
            # Read-modify-write; concurrent verifications may lose an increment.
            await self.verifications.update_record(record.id, encode_value(challenge.code, attempts))
            logger.info("Wrong change-email OTP for user %s (%d/%d)", session.user.id, attempts, max_attempts)
            raise InvalidOtp()

        await self.verifications.delete_record(record.id)
        await self.users.update_user(session.user.id, {"email": email, "email_verified": True})
        logger.info("User %s changed email", session.user.id)
