"""
Error kinds raised by the Slack emoji client

Every failure surfaces as a SlackEmojiError. Callers branch on its kind,
never on the message text.
"""

from enum import Enum


class ErrorKind(Enum):
    TRANSPORT_FAILURE = "transport_failure"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    RATE_LIMITED = "rate_limited"
    NAME_TAKEN = "name_taken"
    ALREADY_EXISTS = "already_exists"
    DOES_NOT_EXIST = "does_not_exist"
    REMOTE_REJECTED = "remote_rejected"
    PARSE_FAILURE = "parse_failure"
    TOKEN_NOT_FOUND = "token_not_found"
    EXHAUSTED = "exhausted"
    BOTH_NAMES_EXHAUSTED = "both_names_exhausted"
    INVALID_VALUE = "invalid_value"
    WALK_FAILURE = "walk_failure"


class SlackEmojiError(Exception):
    """Failure of a Slack emoji operation, tagged with its kind"""

    def __init__(self, kind, message, cause=None, retryable=False):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause
        self.retryable = retryable

    def __str__(self):
        if self.cause is not None:
            return f"{self.message} ({self.kind.value}): {self.cause}"
        return f"{self.message} ({self.kind.value})"

    def __repr__(self):
        return f"SlackEmojiError({self.kind.name}, {self.message!r}, retryable={self.retryable})"


def invalid_value(message):
    return SlackEmojiError(ErrorKind.INVALID_VALUE, message)
