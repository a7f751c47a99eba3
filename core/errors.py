class ConfigurationError(Exception):
    """Required settings are missing or unusable at startup."""


class CompletionError(Exception):
    """The completion API failed, timed out or returned no content."""


class IdentityError(Exception):
    """A bearer credential is missing or could not be verified."""


class BillingError(Exception):
    """The payment provider rejected a request or the subscription state does not allow it."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code
