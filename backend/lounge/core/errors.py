"""
Error taxonomy shared by the WebSocket protocol and the HTTP routes.

Every error is scoped to the action that raised it: the hub reports it to the
originating connection only, and the HTTP layer renders it as
``{"detail": message}`` with ``status_code``.  None of them are fatal to a
connection.
"""


class ChatError(Exception):
    code = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ChatError):
    """Bad username, empty message, unknown frame type."""

    code = "validation"
    status_code = 422


class NameTaken(ChatError):
    code = "name_taken"
    status_code = 409

    def __init__(self, username: str) -> None:
        super().__init__("Username already taken")
        self.username = username


class Unauthorized(ChatError):
    """A chat action was attempted before the connection registered a name."""

    code = "unauthorized"
    status_code = 401

    def __init__(self, message: str = "Not registered") -> None:
        super().__init__(message)


class PersistenceFailure(ChatError):
    code = "persistence"
    status_code = 500


class AttachmentError(ChatError):
    """Rejected or unprocessable upload. Only ever surfaced on the HTTP path."""

    code = "attachment"

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code
