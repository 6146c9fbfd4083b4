"""HTTP route handlers for the change-email OTP flow."""

from fastapi import APIRouter, Depends

from change_email_otp.api import deps
from change_email_otp.schemas.auth import AuthSession
from change_email_otp.schemas.change_email import SendChangeEmailOTPRequest, VerifyChangeEmailOTPRequest
from change_email_otp.schemas.common import ErrorResponse, SuccessResponse
from change_email_otp.services.change_email import ChangeEmailOTPService

router = APIRouter(
    prefix="/change-email-otp",
    tags=["change-email-otp"],
    dependencies=[Depends(deps.enforce_rate_limit)],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)


@router.post(
    "/send",
    response_model=SuccessResponse,
    operation_id="sendChangeEmailOTP",
    description="Send OTP to change email",
)
async def send_change_email_otp(
    payload: SendChangeEmailOTPRequest,
    session: AuthSession | None = Depends(deps.get_current_session),
    service: ChangeEmailOTPService = Depends(deps.get_change_email_service),
) -> SuccessResponse:
    await service.send_change_email_otp(session, payload.email)
    return SuccessResponse(success=True)


@router.post(
    "/verify",
    response_model=SuccessResponse,
    operation_id="verifyChangeEmailOTP",
    description="Verify OTP for changing email",
)
async def verify_change_email_otp(
    payload: VerifyChangeEmailOTPRequest,
    session: AuthSession | None = Depends(deps.get_current_session),
    service: ChangeEmailOTPService = Depends(deps.get_change_email_service),
) -> SuccessResponse:
    await service.verify_change_email_otp(session, payload.email, payload.otp)
    return SuccessResponse(success=True)
