from change_email_otp.schemas.auth import AuthSession, SessionUser
from change_email_otp.schemas.change_email import SendChangeEmailOTPRequest, VerifyChangeEmailOTPRequest
from change_email_otp.schemas.common import ErrorResponse, SuccessResponse

__all__ = [
    "AuthSession",
    "ErrorResponse",
    "SendChangeEmailOTPRequest",
    "SessionUser",
    "SuccessResponse",
    "VerifyChangeEmailOTPRequest",
]
