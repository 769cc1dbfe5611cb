"""Messaging error taxonomy.

All of these describe caller or policy violations and are never retried.
Routers translate them into HTTP responses via ``status_code`` and ``detail``.
"""


class MessagingError(Exception):
    status_code = 400
    detail = "Bad request"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class BadRequest(MessagingError):
    status_code = 400
    detail = "Subject and Content are required"


class Forbidden(MessagingError):
    status_code = 403
    detail = "Not permitted for this role"


class NoAdminAvailable(MessagingError):
    status_code = 400
    detail = "No admin available"


class MissingRecipient(MessagingError):
    status_code = 400
    detail = "RecipientId required for individual messages"


class NotFound(MessagingError):
    status_code = 404
    detail = "Message not found"
