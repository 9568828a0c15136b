"""
Failures raised while running the oauth handshake.

Every error is terminal for the request it happened in.  `kind` is stable and
meant for machines, `message` is meant for people.  Neither may ever contain
the api secret, the cookie secret or an access token.
"""

BAD_REQUEST = 400


SERVER_ERROR = 500


class ShopGrantError(Exception):
    kind = "shopgrant_error"
    status_code = SERVER_ERROR
    default_message = "Shopify authorization failed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {"error": self.kind, "message": self.message}


class MissingParameter(ShopGrantError):
    kind = "missing_parameter"
    status_code = BAD_REQUEST

    def __init__(self, names, message=None):
        self.names = tuple(names)
        super().__init__(
            message or f"Missing required parameter(s): {', '.join(self.names)}."
        )


class InvalidShopDomain(ShopGrantError):
    kind = "invalid_shop_domain"
    status_code = BAD_REQUEST
    default_message = "Shop is not properly formatted."


class MissingConfiguration(ShopGrantError):
    kind = "missing_configuration"
    status_code = SERVER_ERROR

    def __init__(self, names, message=None):
        self.names = tuple(names)
        super().__init__(
            message or f"App is not configured: {', '.join(self.names)} missing."
        )


class InvalidState(ShopGrantError):
    kind = "invalid_state"
    status_code = BAD_REQUEST
    default_message = "Invalid state parameter."


class InvalidSignature(ShopGrantError):
    kind = "invalid_signature"
    status_code = BAD_REQUEST
    default_message = "HMAC signature does not match, request may be forged."


# Upstream bodies can be whole html pages.
MAX_UPSTREAM_BODY_LENGTH = 500


class TokenExchangeFailed(ShopGrantError):
    kind = "token_exchange_failed"
    status_code = BAD_REQUEST

    def __init__(self, upstream_status=None, upstream_body="", message=None):
        self.upstream_status = upstream_status
        self.upstream_body = (upstream_body or "")[:MAX_UPSTREAM_BODY_LENGTH]
        if not message:
            status = upstream_status if upstream_status is not None else "no response"
            message = f"Token exchange failed ({status}): {self.upstream_body}"
        super().__init__(message)


class InternalError(ShopGrantError):
    kind = "internal_error"
    status_code = SERVER_ERROR
    default_message = "Internal server error during Shopify authorization."
