"""
Domain errors raised by the services.

Each error carries the HTTP status it maps to; the handlers registered in
``airdrop.main`` turn them into ``{"error": message}`` responses.
"""


class AirdropError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationFailed(AirdropError):
    status_code = 400
    message = "Invalid request data"


class InvalidAmount(ValidationFailed):
    message = "Reward amount must be a non-negative integer"


class InvalidWalletAddress(ValidationFailed):
    message = "Invalid wallet address format"


class Unauthorized(AirdropError):
    status_code = 401
    message = "Authentication failed"


class NotFound(AirdropError):
    status_code = 404
    message = "Not found"


class UserNotFound(NotFound):
    message = "User not found"


class TaskNotFound(NotFound):
    message = "Task not found"


class UserTaskNotFound(NotFound):
    message = "User task not found"


class Conflict(AirdropError):
    status_code = 400
    message = "Conflict"


class TaskAlreadyStarted(Conflict):
    message = "Task already started"


class TaskAlreadyCompleted(Conflict):
    message = "Task already completed"


class InvalidTransition(Conflict):
    message = "Invalid task status transition"


class ReferralCodeExhausted(AirdropError):
    message = "Could not allocate a referral code"
