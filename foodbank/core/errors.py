# foodbank/core/errors.py
"""
Errors raised by the donation engine and its collaborators.

Every failure leaves the donation collection untouched. `status_code` is what
the HTTP layer answers with (see foodbank.main).
"""


class FoodbankError(Exception):
    status_code = 400

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__name__


class ValidationError(FoodbankError):
    """Bad or missing input for create/register."""
    status_code = 400


class AuthError(FoodbankError):
    """Missing identity, wrong role or bad credentials."""
    status_code = 403


class NotFoundError(FoodbankError):
    status_code = 404


class AlreadyClaimedError(FoodbankError):
    status_code = 409


class MalformedDataError(FoodbankError):
    """Snapshot import payload is not a valid donation collection."""
    status_code = 400


class ExternalSourceError(FoodbankError):
    """Blob store or location provider failed; not the engine's fault."""
    status_code = 502
