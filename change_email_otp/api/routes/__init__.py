from change_email_otp.api.routes.change_email import router as change_email_router

__all__ = ["change_email_router"]
