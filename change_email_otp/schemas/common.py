"""Shared lightweight schemas."""

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Body returned by both change-email endpoints on success."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Body returned for typed change-email failures."""

    code: str
    message: str
