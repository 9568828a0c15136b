import logging
from dataclasses import dataclass, field

import requests
import zope.interface

from .errors import TokenExchangeFailed
from .interfaces import ITokenExchangeClient
from .scopes import split_scopes

logger = logging.getLogger(__name__)


@dataclass
class AccessTokenResult:
    access_token: str
    # Comma separated, exactly as shopify sent it.
    scope: str = ""
    # Whatever else came back, ie. associated_user for online tokens.
    extra: dict = field(default_factory=dict)

    @property
    def access_scopes(self):
        return split_scopes(self.scope)

    def __repr__(self):
        # Keep the token out of logs and tracebacks.
        return f"AccessTokenResult(scope={self.scope!r}, extra_keys={sorted(self.extra)})"


@zope.interface.implementer(ITokenExchangeClient)
@dataclass
class TokenExchangeClient:
    """
    Trade a grant code for an access token.

    Grant codes are single use so a failed exchange is never retried, the
    merchant has to start over with a fresh code.
    """

    token_url: str = "https://{shop_host}/admin/oauth/access_token"

    # Seconds to wait on shopify before giving up.
    timeout: float = 10

    logger: object = field(default=logger)

    def get_token_url(self, shop_host):
        return self.token_url.format(shop_host=shop_host)

    def exchange(self, shop_host, client_id, client_secret, code):
        try:
            response = requests.post(
                self.get_token_url(shop_host),
                json={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "code": code,
                },
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.warning(
                f"Token exchange with {shop_host} did not complete: {type(e).__name__}"
            )
            raise TokenExchangeFailed(upstream_body=type(e).__name__) from e

        if response.status_code != requests.codes.ok:
            self.logger.warning(
                f"Token exchange with {shop_host} returned {response.status_code}"
            )
            raise TokenExchangeFailed(response.status_code, response.text)

        try:
            json_payload = response.json()
        except ValueError as e:
            raise TokenExchangeFailed(
                response.status_code, response.text, "Token response was not json."
            ) from e
        if not isinstance(json_payload, dict):
            json_payload = {}
        access_token = json_payload.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise TokenExchangeFailed(
                response.status_code,
                message="No access token received from Shopify.",
            )
        scope = json_payload.get("scope") or ""
        if not isinstance(scope, str):
            raise TokenExchangeFailed(
                response.status_code,
                message="Granted scopes from Shopify were not a string.",
            )
        return AccessTokenResult(
            access_token=access_token,
            scope=scope,
            extra={
                k: v
                for k, v in json_payload.items()
                if k not in ("access_token", "scope")
            },
        )
