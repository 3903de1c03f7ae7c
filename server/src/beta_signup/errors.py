"""Error taxonomy shared by the signup services and routers.

Every error carries a ``message`` that is safe to show to the applicant.
Internal detail (provider response bodies, store errors) stays in the logs.
"""


class SignupError(Exception):
    """Base class for errors raised by the signup flow"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SignupError):
    """Malformed, missing or policy-violating input"""

    status_code = 400


class RateLimitError(SignupError):
    """The source address has used up its signup quota for the current window"""

    status_code = 429

    def __init__(self, message: str = "Too many requests. Please try again later."):
        super().__init__(message)


class AuthorizationStateError(SignupError):
    """Unknown token, or a record that is not in the required prior state.

    ``reason`` tells operators which condition failed; it is never returned
    to the client.
    """

    status_code = 400

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class DependencyError(SignupError):
    """The record store, bot gate or mail provider failed"""

    status_code = 500
