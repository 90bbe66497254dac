class SessionError(Exception):
    """
    Base for failures reported privately to the originating connection.

    ``code`` is the stable identifier sent in the ``error`` frame.
    """

    code = "error"
    default_message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class BadRequest(SessionError):
    code = "bad-request"
    default_message = "Invalid request"


class NotFound(SessionError):
    code = "not-found"
    default_message = "Not found"


class RoomNotFound(NotFound):
    default_message = "Room not found"


class Forbidden(SessionError):
    code = "forbidden"
    default_message = "You are not allowed to do that"


class InvalidTarget(SessionError):
    code = "invalid-target"
    default_message = "Invalid target participant"


class RateExceeded(SessionError):
    code = "rate-exceeded"
    default_message = "Rate limit exceeded, slow down"


class TransientStoreError(SessionError):
    code = "store-unavailable"
    default_message = "Storage temporarily unavailable, please retry"
