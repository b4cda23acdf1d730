class InvalidCallbackToken(ValueError):
    pass


class ApprovalError(Exception):
    """A decision that cannot be applied; nothing it touched is kept."""

    user_message = "Failed to process the request. Please try again."

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        if user_message:
            self.user_message = user_message


class AccountNotFound(ApprovalError):
    user_message = "This registration no longer exists."


class WorkerNotFound(ApprovalError):
    user_message = "Worker record not found for this registration."


class ApprovalValidationError(ApprovalError):
    user_message = "This registration cannot be approved: required data is missing."


class AlreadyDecided(ApprovalError):
    user_message = "This request has already been processed."


class NotAllowedToDecide(ApprovalError):
    user_message = "⛔ You are not allowed to decide on this request."


class GatewayError(RuntimeError):
    """The messaging provider refused or failed a call that had to succeed."""


class RegistrationError(Exception):
    """Registration data that cannot be turned into an account."""
