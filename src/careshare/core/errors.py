"""
Domain errors surfaced to API callers as `{code, message, details}`.
"""
from typing import Any, Optional


class CareShareError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class InvalidBodyError(CareShareError):
    code = "INVALID_BODY"
    status_code = 400
    default_message = "Invalid request body"


class InvalidIdError(CareShareError):
    code = "INVALID_ID"
    status_code = 400
    default_message = "Invalid id"


class NotFoundError(CareShareError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class InvalidPhoneError(CareShareError):
    code = "INVALID_PHONE"
    status_code = 400
    default_message = "Invalid phone number format."


class InvalidZipError(CareShareError):
    code = "INVALID_ZIP"
    status_code = 400
    default_message = "Invalid zip provided"


class NoSkillError(CareShareError):
    code = "NO_SKILL"
    status_code = 422
    default_message = "Could not determine skill"


class NoSeniorError(CareShareError):
    code = "NO_SENIOR"
    status_code = 422
    default_message = "Senior id is required to schedule"


class MissingEnvError(CareShareError):
    code = "MISSING_ENV"
    status_code = 500
    default_message = "Missing required env vars"


class InvalidSignatureError(CareShareError):
    code = "INVALID_SIGNATURE"
    status_code = 401
    default_message = "Invalid webhook signature"


class UpstreamError(CareShareError):
    code = "UPSTREAM_ERROR"
    status_code = 502
    default_message = "Upstream request failed"


class IllegalTransitionError(CareShareError):
    code = "ILLEGAL_TRANSITION"
    status_code = 409
    default_message = "Illegal appointment status transition"


class SignatureError(InvalidSignatureError):
    """The signature header could not be compared at all"""
    code = "SIGNATURE_ERROR"
    default_message = "Signature check failed"
