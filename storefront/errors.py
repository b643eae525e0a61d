class StorefrontError(Exception):
    """Base error for the storefront.

    ``message`` is shown to clients unless ``public_message`` is set, in which
    case ``message`` only reaches the log.
    """

    status_code = 500
    message = "Internal server error"
    public_message = None

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(StorefrontError):
    status_code = 400
    message = "Invalid request"


class AuthError(StorefrontError):
    status_code = 401
    message = "Unauthorized"


class NotFound(StorefrontError):
    status_code = 404
    message = "Not found"


class StorageError(StorefrontError):
    # details go to the log, never to the client
    status_code = 500
    public_message = "Internal server error"


class GatewayError(StorefrontError):
    status_code = 502
    public_message = "Payment failed"
