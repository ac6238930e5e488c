"""Error taxonomy shared by the services and the HTTP layer.

Each error carries the HTTP status it is rendered with, so services never
import FastAPI and routes never translate error types by hand.
"""


class CatalogError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CatalogError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(CatalogError):
    status_code = 401
    default_message = "Not authorized, invalid token"


class ForbiddenError(CatalogError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Not found"


class ExpiredError(CatalogError):
    status_code = 400
    default_message = "OTP has expired"


class InvalidCredentialError(CatalogError):
    status_code = 400
    default_message = "Invalid OTP"


class UnexpectedError(CatalogError):
    status_code = 500
    default_message = "Internal server error"
