"""OTP generation, expiry arithmetic, and the stored value codec."""

import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

IDENTIFIER_PREFIX = "change-email-otp-"


@dataclass(frozen=True)
class OTPChallenge:
    """Decoded form of a verification record value."""

    code: str
    attempts: int = 0


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def otp_identifier(email: str) -> str:
    """Generate the verification identifier that scopes an OTP to a target email."""
    return f"{IDENTIFIER_PREFIX}{normalize_email(email)}"


def generate_otp(length: int) -> str:
    """Create a zero-padded numeric OTP with configurable length."""
    if length < 1:
        raise ValueError("OTP length must be at least 1")
    upper_bound = 10 ** length
    return f"{secrets.randbelow(upper_bound):0{length}d}"


def compute_expiry(minutes: int) -> datetime:
    return _now_utc() + timedelta(minutes=minutes)


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    """True once `expires_at` lies strictly in the past.

    Naive datetimes (as returned by some database drivers) are treated as UTC.
    """
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < (now or _now_utc())


def encode_value(code: str, attempts: int) -> str:
    return f"{code}:{attempts}"


def decode_value(value: str) -> OTPChallenge:
    """Split a stored value into code and attempt counter.

    Only the leading digits of the counter are read. Records written without
    a counter, or with a garbled one, count as zero attempts.
    """
    code, _, raw_attempts = value.partition(":")
    match = re.match(r"\d+", raw_attempts)
    attempts = int(match.group()) if match else 0
    return OTPChallenge(code=code, attempts=attempts)
