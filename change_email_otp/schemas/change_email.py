"""Pydantic schemas for the change-email OTP send and verify flows."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from change_email_otp.core.config import settings


class SendChangeEmailOTPRequest(BaseModel):
    """Payload used to request a code for a new email address."""

    email: EmailStr = Field(description="The email address for sending the change email OTP")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class VerifyChangeEmailOTPRequest(SendChangeEmailOTPRequest):
    """Payload used when submitting the received code."""

    email: EmailStr = Field(description="The email address to verify the change email OTP")
    otp: str = Field(
        min_length=settings.CHANGE_EMAIL_OTP_LENGTH,
        max_length=settings.CHANGE_EMAIL_OTP_LENGTH,
        description="The OTP used to verify the change email OTP",
    )
