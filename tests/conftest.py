"""Fakes for the capabilities the handshake is given."""

import hashlib
import hmac
from dataclasses import dataclass, field
from urllib.parse import urlencode

import pytest
import zope.interface

from shopgrant import OAuthConfig
from shopgrant.interfaces import (
    IAccessTokenHandler,
    IStateStore,
    ITokenExchangeClient,
    IWebShim,
)
from shopgrant.token_exchange import AccessTokenResult


CLIENT_ID = "abc123"
CLIENT_SECRET = "hush"
CALLBACK_URL = "https://app.example.com/auth/callback"
HOME_URL = "https://app.example.com/dashboard"


@dataclass
class FakeResponse:
    status_code: int
    location: str = None
    body: object = None


@zope.interface.implementer(IWebShim)
@dataclass
class FakeWebShim:
    params: dict = field(default_factory=dict)

    def get_param(self, name, default=None):
        return self.params.get(name, default)

    def get_params(self, param_names=None, default=None):
        if param_names:
            return {name: self.params.get(name, default) for name in param_names}
        return dict(self.params)

    def get_auth_callback_url(self, get_params=None):
        return CALLBACK_URL

    def get_home_url(self, get_params=None, path_only=False):
        return HOME_URL + ("?" + urlencode(get_params) if get_params else "")

    def redirect_302_url(self, url, with_headers=True):
        return FakeResponse(302, location=url)

    def response_200_string(self, content, content_type="text/html"):
        return FakeResponse(200, body=content)

    def response_error(self, error, keep_cookies=True):
        return FakeResponse(error.status_code, body=error.as_dict())


@zope.interface.implementer(IStateStore)
@dataclass
class FakeStateStore:
    values: dict = field(default_factory=dict)
    max_ages: dict = field(default_factory=dict)
    deleted: list = field(default_factory=list)

    def get(self, key, default=None):
        return self.values.get(key, default)

    def set(self, key, value, max_age):
        self.values[key] = value
        self.max_ages[key] = max_age

    def delete(self, key):
        self.values.pop(key, None)
        self.deleted.append(key)


@zope.interface.implementer(ITokenExchangeClient)
@dataclass
class FakeTokenClient:
    result: AccessTokenResult = None
    error: Exception = None
    calls: list = field(default_factory=list)

    def exchange(self, shop_host, client_id, client_secret, code):
        self.calls.append((shop_host, client_id, client_secret, code))
        if self.error:
            raise self.error
        return self.result


@zope.interface.implementer(IAccessTokenHandler)
@dataclass
class FakeTokenHandler:
    received: list = field(default_factory=list)

    def on_access_token(self, shop_host, token_result):
        self.received.append((shop_host, token_result))


def sign_params(params, secret=CLIENT_SECRET):
    """Sign params the way shopify does and return them with the hmac."""
    message = "&".join(f"{k}={params[k]}" for k in sorted(params))
    signed = dict(params)
    signed["hmac"] = hmac.new(
        secret.encode("utf8"), message.encode("utf8"), hashlib.sha256
    ).hexdigest()
    return signed


@pytest.fixture
def oauth_config():
    return OAuthConfig(
        client_id=CLIENT_ID,
        client_secret=CLIENT_SECRET,
        scopes=("read_products", "write_products"),
    )


@pytest.fixture
def web_shim():
    return FakeWebShim()


@pytest.fixture
def state_store():
    return FakeStateStore()


@pytest.fixture
def token_client():
    return FakeTokenClient(
        result=AccessTokenResult(
            access_token="shpat_secret_token", scope="read_products,write_products"
        )
    )


@pytest.fixture
def token_handler():
    return FakeTokenHandler()
