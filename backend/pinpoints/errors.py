"""Error kinds raised by the service layers.

Every error carries the HTTP status and the client-facing message it maps
to. The application installs a single exception handler that renders any
`ApiError` as ``{"message": ...}``, so no internal detail (exception text,
tracebacks) ever reaches the client.
"""


class ApiError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, message=None, cause=None):
        self.message = message or self.message
        self.cause = cause
        super().__init__(self.message)


# auth layer

class AuthError(ApiError):
    pass


class MissingCredential(AuthError):
    status_code = 400
    message = "Could not find Authorization header"


class InvalidCredential(AuthError):
    status_code = 401
    message = "Invalid Token"


class MalformedClaims(AuthError):
    status_code = 400

    def __init__(self, claim: str, cause=None):
        super().__init__(f"Could not find {claim} in given token", cause)


# validation

class BadRequestBody(ApiError):
    status_code = 400
    message = "Could not parse given body"


# store layer

class StoreError(ApiError):
    pass


class PersistenceError(StoreError):
    status_code = 400
    message = "Could not insert in database"


class NotFound(StoreError):
    status_code = 404
    message = "Could not find marker"


class StoreUnavailable(StoreError):
    status_code = 503
    message = "Could not reach database"


# routing

class MethodNotAllowed(ApiError):
    status_code = 405

    def __init__(self, method: str):
        super().__init__(f"Method {method} is not supported")


class StartupError(RuntimeError):
    """Fatal failure while preparing the service; nothing is served."""
