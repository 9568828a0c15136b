"""
Pyramid routes for the oauth handshake.

    config.include("shopgrant.web.pyramid_views")

Settings:

    shopify.client_id, shopify.client_secret
    shopify.scopes: comma or whitespace separated, kept in order.
    shopify.redirect_uri: optional, defaults to the callback route url.
    shopify.state_max_age, shopify.session_max_age, shopify.token_timeout
    shopgrant.cookie_secret: required, signs the state and session cookies.
    shopgrant.home_route: route to land on after the handshake, "home".
    shopgrant.auth_path, shopgrant.auth_callback_path
    shopgrant.secure_cookies: only turn off for plain http development.
"""
import logging

from pyramid.exceptions import ConfigurationError
from pyramid.settings import asbool, aslist

from .. import AuthInitiator, CallbackProcessor, OAuthConfig
from ..errors import ShopGrantError
from ..storage.cookie_shim import CookieStateStore, StoredSessionHandler
from ..token_exchange import TokenExchangeClient
from .pyramid_shim import PyramidWebShim, PyramidWebShimConfig

logger = logging.getLogger(__name__)


AUTH_ROUTE = "shopgrant.auth"


AUTH_CALLBACK_ROUTE = "shopgrant.auth_callback"


def parse_scopes(value):
    if not value:
        return ()
    if isinstance(value, str):
        value = value.replace(",", " ")
    return tuple(aslist(value, flatten=True))


def config_from_settings(settings, prefix="shopify."):
    """Build OAuthConfig from an ini style settings mapping."""

    def get(name, default=None):
        return settings.get(prefix + name, default)

    optional = {}
    for name, convert in (
        ("state_max_age", int),
        ("session_max_age", int),
        ("token_timeout", float),
    ):
        if get(name) is not None:
            optional[name] = convert(get(name))
    return OAuthConfig(
        client_id=get("client_id"),
        client_secret=get("client_secret"),
        scopes=parse_scopes(get("scopes")),
        redirect_uri=get("redirect_uri"),
        **optional,
    )


def get_web_shim(request):
    return PyramidWebShim(
        config=request.registry.shopgrant_web_shim_config, request=request
    )


def auth_view(request):
    web_shim = get_web_shim(request)
    initiator = AuthInitiator(
        config=request.registry.shopgrant_oauth_config,
        web_shim=web_shim,
        state_store=CookieStateStore(web_shim),
    )
    try:
        return initiator.begin_auth(
            embedded=asbool(web_shim.get_param("embedded", False))
        )
    except ShopGrantError as e:
        logger.info(f"Oauth could not start: {e.kind}")
        # A failed start must not leave a nonce behind in the browser.
        return web_shim.response_error(e, keep_cookies=False)


def auth_callback_view(request):
    oauth_config = request.registry.shopgrant_oauth_config
    web_shim = get_web_shim(request)
    state_store = CookieStateStore(web_shim)
    processor = CallbackProcessor(
        config=oauth_config,
        web_shim=web_shim,
        state_store=state_store,
        token_client=TokenExchangeClient(timeout=oauth_config.token_timeout),
        token_handler=StoredSessionHandler(
            state_store,
            session_key=oauth_config.session_key,
            max_age=oauth_config.session_max_age,
        ),
    )
    try:
        return processor.auth_callback()
    except ShopGrantError as e:
        logger.info(f"Oauth callback rejected: {e.kind}")
        return web_shim.response_error(e)


def includeme(config):
    settings = config.get_settings()
    cookie_secret = settings.get("shopgrant.cookie_secret")
    if not cookie_secret:
        raise ConfigurationError("shopgrant.cookie_secret must be set.")

    config.registry.shopgrant_oauth_config = config_from_settings(settings)
    config.registry.shopgrant_web_shim_config = PyramidWebShimConfig(
        auth_callback_route=AUTH_CALLBACK_ROUTE,
        home_route=settings.get("shopgrant.home_route", "home"),
        cookie_secret=cookie_secret,
        secure_cookies=asbool(settings.get("shopgrant.secure_cookies", True)),
    )
    config.add_route(AUTH_ROUTE, settings.get("shopgrant.auth_path", "/auth/shopify"))
    config.add_route(
        AUTH_CALLBACK_ROUTE,
        settings.get("shopgrant.auth_callback_path", "/auth/callback"),
    )
    config.add_view(auth_view, route_name=AUTH_ROUTE, request_method="GET")
    config.add_view(
        auth_callback_view, route_name=AUTH_CALLBACK_ROUTE, request_method="GET"
    )
