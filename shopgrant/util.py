import base64
import re
from urllib.parse import urlencode

from .errors import InvalidShopDomain


MYSHOPIFY_DOMAIN = "myshopify.com"


SHOP_NAME_RE = re.compile(r"[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?")


# The url merchants copy out of the new admin: https://admin.shopify.com/store/acme
ADMIN_STORE_URL_RE = re.compile(
    r"^https?://admin\.shopify\.com/store/([^/?#]*)(?:[/?#].*)?$", re.IGNORECASE
)


SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


REDACTED_PARAMS = ("code", "hmac", "state")


def build_shop_host(shop_name, myshopify_domain=MYSHOPIFY_DOMAIN):
    return f"{shop_name}.{myshopify_domain}"


def normalize_shop_domain(raw_shop, myshopify_domain=MYSHOPIFY_DOMAIN):
    """
    Turn whatever the merchant typed into a canonical shop host.

    Accepts "acme", "acme.myshopify.com", "https://acme.myshopify.com/" and
    "https://admin.shopify.com/store/acme", all of which give
    "acme.myshopify.com".  Raises `InvalidShopDomain` for anything else.
    """
    if not isinstance(raw_shop, str):
        raise InvalidShopDomain()
    shop = raw_shop.strip()

    admin_match = ADMIN_STORE_URL_RE.match(shop)
    if admin_match:
        shop_name = admin_match.group(1)
    else:
        shop = SCHEME_RE.sub("", shop, count=1)
        if shop.endswith("/"):
            shop = shop[:-1]
        suffix = "." + myshopify_domain
        if shop.lower().endswith(suffix):
            shop = shop[: -len(suffix)]
        shop_name = shop

    if not SHOP_NAME_RE.fullmatch(shop_name):
        raise InvalidShopDomain(f"Shop is not properly formatted: {raw_shop!r}")
    return build_shop_host(shop_name.lower(), myshopify_domain)


def encode_shop_host(shop_host):
    """
    Build the "host" param the admin passes around for embedded apps.

    Shopify's version is base64 of "{shop_host}/admin", sometimes with the
    padding stripped, we always keep it.
    """
    return base64.b64encode(f"{shop_host}/admin".encode("utf8")).decode("ascii")


def build_authorization_url(shop_host, client_id, redirect_uri, scopes, state):
    """
    Url on the shop that asks the merchant to grant our scopes.

    `shop_host` must already be normalized.
    """
    query = [
        ("client_id", client_id),
        # The scopes our app needs, like write_orders, read_orders, etc.
        ("scope", ",".join(scopes)),
        # This tells shopify where to send the callback with our grant code.
        ("redirect_uri", redirect_uri),
        ("state", state),
        ("response_type", "code"),
    ]
    return f"https://{shop_host}/admin/oauth/authorize?{urlencode(query)}"


def redact_params(params, redacted=REDACTED_PARAMS):
    """Copy params for logging with single use credentials masked."""
    return {
        k: ("<redacted>" if k in redacted and v else v) for k, v in params.items()
    }
