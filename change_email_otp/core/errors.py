"""Typed failures returned by the change-email OTP flow."""


class ChangeEmailOTPError(Exception):
    """Base domain error with a machine-readable code and HTTP status."""

    code = "BAD_REQUEST"
    message = "Bad request"
    status_code = 400

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(ChangeEmailOTPError):
    code = "UNAUTHORIZED"
    message = "Unauthorized"
    status_code = 401


class EmailAlreadyExists(ChangeEmailOTPError):
    code = "EMAIL_ALREADY_EXISTS"
    message = "Email already exists"


class InvalidOtp(ChangeEmailOTPError):
    code = "INVALID_OTP"
    message = "Invalid OTP"


class OtpExpired(ChangeEmailOTPError):
    code = "OTP_EXPIRED"
    message = "OTP expired"


class TooManyAttempts(ChangeEmailOTPError):
    code = "TOO_MANY_ATTEMPTS"
    message = "Too many attempts"


class VerificationConflictError(Exception):
    """Raised by a verification store when the identifier already has a record."""

    def __init__(self, identifier: str):
        super().__init__(f"Verification record already exists for {identifier!r}")
        self.identifier = identifier
