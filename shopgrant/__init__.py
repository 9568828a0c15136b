"""
@NOTE: Resolution for shop name overloading.

shop_name: The name of the shop, used as a subdomain of myshopify.com
shop_host: The shopname and the correct top level domain: "{shop_name}.myshopify.com".
    Only `normalize_shop_domain` creates these from outside input.
encoded_shop_host: base64 of "{shop_host}/admin", passed around by shopify as
    the "host" param for embedded apps.

@NOTE: The handshake.

AuthInitiator.begin_auth stores a nonce and sends the merchant to shopify's
grant screen.  Shopify sends them back to CallbackProcessor.auth_callback
which checks, in this order, that the params are there, that the state matches
the stored nonce (which is then forgotten), that the hmac is ours and finally
trades the grant code for an access token.  Any check that fails ends the
request with a `ShopGrantError`, nothing is retried.
"""
import functools
import hmac
import html
import json
import logging
from dataclasses import dataclass, field
from typing import Callable

from .errors import (
    ShopGrantError,
    MissingParameter,
    MissingConfiguration,
    InvalidState,
    InvalidSignature,
    InternalError,
)
from .interfaces import IWebShim, IStateStore, ITokenExchangeClient, IAccessTokenHandler
from .scopes import get_missing_scopes
from .signing import generate_nonce, verify_hmac
from .util import (
    build_authorization_url,
    encode_shop_host,
    normalize_shop_domain,
    redact_params,
)

logger = logging.getLogger(__name__)


MAX_STATE_AGE_IN_SECONDS = 10 * 60


DAY_IN_SECONDS = 24 * 60 * 60


@dataclass
class OAuthConfig:
    """
    Mechanism to provide configuration to AuthInitiator and CallbackProcessor.
    """

    client_id: str
    client_secret: str
    # The shopify access scopes that our app needs, such as read_orders, write_orders, etc.
    scopes: tuple = ()
    # Where shopify sends the merchant back to, when empty it is built from
    # the callback route of the current request.
    redirect_uri: str = None
    # Name the nonce is stored under between begin_auth and auth_callback.
    state_key: str = "shopify_oauth_state"
    state_max_age: int = MAX_STATE_AGE_IN_SECONDS
    # Name the issued access token is stored under.
    session_key: str = "shopify_session"
    session_max_age: int = DAY_IN_SECONDS
    # Seconds to wait for the token exchange.
    token_timeout: float = 10

    def __post_init__(self):
        self.scopes = tuple(self.scopes)
        if not 0 < self.state_max_age <= MAX_STATE_AGE_IN_SECONDS:
            raise ValueError(
                f"state_max_age must be between 1 and {MAX_STATE_AGE_IN_SECONDS} seconds."
            )

    def __repr__(self):
        return (
            f"OAuthConfig(client_id={self.client_id!r}, scopes={self.scopes!r}, "
            f"redirect_uri={self.redirect_uri!r})"
        )


TOPLEVEL_REDIRECT_HTML_CONTENT_FMT = """<!DOCTYPE html>
<html>
  <head>
    <script src="https://unpkg.com/@shopify/app-bridge@3"></script>
    <title>Redirecting to Shopify...</title>
    <script>
      document.addEventListener('DOMContentLoaded', function () {
        var config = %(config)s;
        var AppBridge = window['app-bridge'];
        if (window.top === window.self || !AppBridge) {
          window.top.location.href = config.authUrl;
        } else {
          var app = AppBridge.createApp({
            apiKey: config.apiKey,
            host: config.encodedShopHost,
          });
          var Redirect = AppBridge.actions.Redirect;
          Redirect.create(app).dispatch(Redirect.Action.REMOTE, config.authUrl);
        }
      });
    </script>
  </head>
  <body>
    <p>If you are not redirected, <a href="%(auth_url)s" target="_top">click here</a>.</p>
  </body>
</html>"""


def _with_internal_errors(method_name):
    """
    Let ShopGrantErrors through, log anything else and replace it with an
    InternalError that carries nothing from the original.
    """

    def wrap(fn):
        @functools.wraps(fn)
        def wrapper(self, *args, **kwargs):
            try:
                return fn(self, *args, **kwargs)
            except ShopGrantError:
                raise
            except Exception:
                self.logger.exception(f"Unexpected error in {method_name}.")
                raise InternalError() from None

        return wrapper

    return wrap


@dataclass
class AuthInitiator:
    """
    Start the oauth handshake for a shop.
    """

    config: OAuthConfig
    web_shim: IWebShim
    state_store: IStateStore
    nonce_factory: Callable = field(default=generate_nonce)
    logger: object = field(default=logger)
    toplevel_redirect_html_content_fmt: str = TOPLEVEL_REDIRECT_HTML_CONTENT_FMT

    def get_redirect_uri(self):
        return self.config.redirect_uri or self.web_shim.get_auth_callback_url()

    @_with_internal_errors("begin_auth")
    def begin_auth(self, shop=None, embedded=False):
        """
        Store a fresh nonce and redirect to shopify to request a grant.

        `shop` is whatever the merchant typed, it is taken from the request
        when not given.  When `embedded` we are probably in the admin iframe,
        which shopify refuses to show the grant screen in, so answer with a
        page that redirects the top window instead.
        """
        if shop is None:
            shop = self.web_shim.get_param("shop")
        if not shop or not shop.strip():
            raise MissingParameter(["shop"])
        shop_host = normalize_shop_domain(shop)
        if not self.config.client_id:
            raise MissingConfiguration(["client_id"])

        nonce = self.nonce_factory()
        auth_url = build_authorization_url(
            shop_host,
            self.config.client_id,
            self.get_redirect_uri(),
            self.config.scopes,
            nonce,
        )
        self.state_store.set(
            self.config.state_key, nonce, max_age=self.config.state_max_age
        )
        try:
            response = self.get_authorize_response(shop_host, auth_url, embedded)
        except Exception:
            # The merchant never got the url, so the nonce must not outlive this.
            self.state_store.delete(self.config.state_key)
            raise
        self.logger.info(f"Starting oauth for {shop_host}, embedded={bool(embedded)}")
        return response

    def get_authorize_response(self, shop_host, auth_url, embedded):
        if embedded:
            encoded_shop_host = self.web_shim.get_param("host") or encode_shop_host(
                shop_host
            )
            return self.web_shim.response_200_string(
                self.get_toplevel_redirect_html_content(
                    self.config.client_id, encoded_shop_host, auth_url
                )
            )
        return self.web_shim.redirect_302_url(auth_url)

    def get_toplevel_redirect_html_content(self, api_key, encoded_shop_host, auth_url):
        """Special html/js to break out of the iframe for oauth."""
        # Dump config into html as an object by serializing config with json.
        # Use % so we don't have to escape "{" and "}".
        config_json_str = json.dumps(
            {
                "apiKey": api_key,
                "encodedShopHost": encoded_shop_host,
                "authUrl": auth_url,
            }
        ).replace("</", "<\\/")
        return self.toplevel_redirect_html_content_fmt % {
            "config": config_json_str,
            "auth_url": html.escape(auth_url),
        }


REQUIRED_CALLBACK_PARAMS = ("shop", "code", "state", "hmac")


@dataclass
class CallbackProcessor:
    """
    Finish the oauth handshake when shopify redirects back with a grant code.
    """

    config: OAuthConfig
    web_shim: IWebShim
    state_store: IStateStore
    token_client: ITokenExchangeClient
    # Told about the access token once every check has passed.
    token_handler: IAccessTokenHandler
    logger: object = field(default=logger)

    def check_nonce_matches(self, stored_nonce, state):
        if not isinstance(stored_nonce, str) or not stored_nonce:
            return False
        return hmac.compare_digest(stored_nonce.encode("utf8"), state.encode("utf8"))

    def consume_nonce(self):
        """Read the stored nonce and forget it, it is only good once."""
        stored_nonce = self.state_store.get(self.config.state_key)
        self.state_store.delete(self.config.state_key)
        return stored_nonce

    @_with_internal_errors("auth_callback")
    def auth_callback(self, params=None):
        """
        Validate the callback, get the access token, then redirect home.

        Every check is a hard gate, nothing after a failed check runs.
        """
        if params is None:
            params = self.web_shim.get_params()
        self.logger.debug(f"Oauth callback params: {redact_params(params)}")

        missing = [name for name in REQUIRED_CALLBACK_PARAMS if not params.get(name)]
        if missing:
            raise MissingParameter(missing)

        stored_nonce = self.consume_nonce()
        if stored_nonce is None:
            self.logger.info("No oauth state stored, it probably expired.")
            raise InvalidState()
        if not self.check_nonce_matches(stored_nonce, params["state"]):
            self.logger.warning("Oauth state does not match the stored nonce.")
            raise InvalidState("Nonce does not match.")

        if not self.config.client_secret:
            raise MissingConfiguration(["client_secret"])
        if not verify_hmac(params, self.config.client_secret):
            self.logger.warning("Oauth callback hmac does not match.")
            raise InvalidSignature()

        # The hmac checked out but this host is about to receive our secret.
        shop_host = normalize_shop_domain(params["shop"])
        if not self.config.client_id:
            raise MissingConfiguration(["client_id"])

        token_result = self.token_client.exchange(
            shop_host, self.config.client_id, self.config.client_secret, params["code"]
        )
        missing_scopes = get_missing_scopes(
            token_result.access_scopes, self.config.scopes
        )
        if missing_scopes:
            self.logger.warning(
                f"{shop_host} did not grant scopes: {','.join(missing_scopes)}"
            )
        self.token_handler.on_access_token(shop_host, token_result)
        self.logger.info(f"Oauth completed for {shop_host}")

        return self.web_shim.redirect_302_url(
            self.web_shim.get_home_url(
                get_params={
                    "shop": shop_host,
                    "host": params.get("host") or encode_shop_host(shop_host),
                }
            )
        )
