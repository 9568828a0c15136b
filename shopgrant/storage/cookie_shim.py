from dataclasses import dataclass

import zope.interface

from ..interfaces import IAccessTokenHandler, IStateStore, IWebShim


@zope.interface.implementer(IStateStore)
@dataclass
class CookieStateStore:
    """
    Keep short lived state in signed cookies on the browser.

    Nothing is kept server side, the cookie is the store.  Values must be
    json serializable.
    """

    web_shim: IWebShim

    def get(self, key, default=None):
        return self.web_shim.get_cookie(key, signed=True, default=default)

    def set(self, key, value, max_age):
        self.web_shim.set_cookie(key, value, signed=True, max_age=max_age)

    def delete(self, key):
        self.web_shim.delete_cookie(key)


DAY_IN_SECONDS = 24 * 60 * 60


@zope.interface.implementer(IAccessTokenHandler)
@dataclass
class StoredSessionHandler:
    """
    Default home for a freshly issued access token: one session entry in a
    state store holding the shop, token and granted scopes.

    Apps with a real session or credential store should provide their own
    IAccessTokenHandler instead.
    """

    state_store: IStateStore
    session_key: str = "shopify_session"
    max_age: int = DAY_IN_SECONDS

    def on_access_token(self, shop_host, token_result):
        self.state_store.set(
            self.session_key,
            {
                "shop": shop_host,
                "access_token": token_result.access_token,
                "scope": token_result.scope,
            },
            max_age=self.max_age,
        )
