"""
Domain exceptions.

Services raise these; the API layer turns them into HTTP
responses using status_code and payload(). They subclass
ValueError so callers that only care about "the request was
rejected" can keep catching ValueError.
"""


class DomainError(ValueError):
    status_code: int = 400

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def payload(self) -> dict:
        """Response body: {"error": message, **extra}."""
        return {"error": self.message, **self.extra}


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Duplicate email, last super-admin, self-deactivation, etc."""
    status_code = 400


class AuthenticationError(DomainError):
    status_code = 401


class AccountLockedError(DomainError):
    status_code = 423

    def __init__(self, minutes_remaining: int):
        super().__init__(
            f"account locked, try again in {minutes_remaining} minutes",
            minutes_remaining=minutes_remaining,
        )
        self.minutes_remaining = minutes_remaining


class FeatureDisabledError(DomainError):
    status_code = 404
