from zope.interface import Interface


class IWebShim(Interface):
    """Bridge between the handshake and whatever web framework serves it."""

    def get_param(name, default=None):
        """Return a single query parameter."""

    def get_params(param_names=None, default=None):
        """Return the query parameters, all of them unless names are given."""

    def set_cookie(name, value, signed=True, max_age=None):
        """Set a cookie on the outgoing response."""

    def get_cookie(name, signed=True, default=None):
        """Read a cookie from the incoming request."""

    def delete_cookie(name):
        """Overwrite a cookie with an empty, already expired value."""

    def get_auth_callback_url(get_params=None):
        """Absolute url shopify should redirect back to."""

    def get_home_url(get_params=None, path_only=False):
        """Url of the application landing page."""

    def redirect_302_url(url, with_headers=True):
        """Return a redirect response."""

    def response_200_string(content, content_type="text/html"):
        """Return a response with the given body."""

    def response_error(error, keep_cookies=True):
        """Render a `ShopGrantError` as a response.

        Cookies already set during the request go along unless `keep_cookies`
        is false.
        """


class IStateStore(Interface):
    """Key value store holding state between requests."""

    def get(key, default=None):
        """Return the value stored under key."""

    def set(key, value, max_age):
        """Store value under key for at most max_age seconds."""

    def delete(key):
        """Forget key, storing nothing in its place."""


class ITokenExchangeClient(Interface):
    def exchange(shop_host, client_id, client_secret, code):
        """Trade an authorization code for an `AccessTokenResult`."""


class IAccessTokenHandler(Interface):
    """Decides how the application keeps the access token it was issued."""

    def on_access_token(shop_host, token_result):
        """Called once per successful callback."""
