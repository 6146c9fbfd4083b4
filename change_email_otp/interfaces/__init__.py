from change_email_otp.interfaces.notifier import Notifier
from change_email_otp.interfaces.rate_limiter import RateLimiter
from change_email_otp.interfaces.user_directory import UserDirectory
from change_email_otp.interfaces.verification_store import VerificationRecord, VerificationStore

__all__ = [
    "Notifier",
    "RateLimiter",
    "UserDirectory",
    "VerificationRecord",
    "VerificationStore",
]
