from __future__ import annotations


class ValidationError(ValueError):
    """Form input rejected; `errors` maps field name -> user-facing message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Invalid input.")


class AuthError(Exception):
    def __init__(self, message: str, status_code: int = 401):
        self.status_code = status_code
        super().__init__(message)


class CompareError(RuntimeError):
    """The remote chat-completion call failed."""


class ComparisonBusyError(RuntimeError):
    """A comparison is already in flight for this user."""


class ExportError(RuntimeError):
    pass
