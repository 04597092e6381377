"""Domain errors raised by the service layer.

Each carries a machine-readable code and the HTTP status the API answers
with; `app.main` registers the handler that renders them.
"""


class MembershipError(Exception):
    code = "ERROR"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(MembershipError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(MembershipError):
    code = "CONFLICT"
    status_code = 409


class UnauthorizedError(MembershipError):
    """Caller is authenticated but is not the owner, assignee or member required."""

    code = "UNAUTHORIZED"
    status_code = 403


class TransactionAbortedError(MembershipError):
    code = "TRANSACTION_ABORTED"
    status_code = 409

    def __init__(self, message: str = "Concurrent modification detected, please retry"):
        super().__init__(message)
