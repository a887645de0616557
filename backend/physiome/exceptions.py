class PhysioMeError(Exception):
    """Base for errors that map onto an HTTP status and a JSON envelope."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(PhysioMeError):
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(PhysioMeError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(PhysioMeError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PhysioMeError):
    status_code = 404
    default_message = "Not found"


class Conflict(PhysioMeError):
    status_code = 409
    default_message = "Conflict"


class Transient(PhysioMeError):
    """Transport or persistence failure; the underlying message is echoed."""
    status_code = 500
