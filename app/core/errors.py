"""
Typed errors raised by the marketplace core.

Each error carries the HTTP status and the stable machine-readable code the
REST boundary puts in the error envelope, so services never build responses.
"""
from typing import Optional


class MarketplaceError(Exception):
    status_code: int = 400
    code: str = "poleplace_error"
    default_message: str = "Marketplace error."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    status_code = 400
    code = "poleplace_validation_error"
    default_message = "Invalid or missing field."


class AuthenticationError(MarketplaceError):
    status_code = 401
    code = "poleplace_not_authenticated"
    default_message = "You must be authenticated to access this endpoint."


class AuthorizationError(MarketplaceError):
    status_code = 403
    code = "poleplace_not_authorized"
    default_message = "You are not authorized to perform this action."


class NotFoundError(MarketplaceError):
    status_code = 404
    code = "poleplace_not_found"
    default_message = "The requested resource was not found."


class SelfPurchaseError(MarketplaceError):
    status_code = 400
    code = "poleplace_own_product"
    default_message = "You cannot buy your own product."


class PersistenceError(MarketplaceError):
    status_code = 500
    code = "poleplace_persistence_error"
    default_message = "Failed to save changes."
