import hashlib
import hmac
import secrets


NONCE_BYTES = 16


def generate_nonce(nbytes=NONCE_BYTES):
    """Hex encoded random token, 2 characters per byte."""
    return secrets.token_hex(nbytes)


def encode_params_for_hmac(params):
    """
    Build the message shopify signs: "k1=v1&k2=v2" sorted by key.

    The hmac itself is left out and values are used exactly as received,
    nothing is re-encoded.  If a key repeats the last value wins.
    """
    items = dict(params.items())
    items.pop("hmac", None)
    return "&".join(f"{k}={items[k]}" for k in sorted(items))


def calculate_hmac(api_secret, params):
    if not api_secret or not isinstance(api_secret, str):
        raise ValueError("A non-empty api secret is required to sign params.")
    return hmac.new(
        api_secret.encode("utf8"),
        encode_params_for_hmac(params).encode("utf8"),
        hashlib.sha256,
    ).hexdigest()


def verify_hmac(params, api_secret):
    """
    Check the hmac shopify attached to a redirect.

    Returns False for a missing or mismatched hmac, the comparison does not
    leak timing.  Only raises when the secret itself is unusable.
    """
    hmac_to_check = params.get("hmac")
    our_hmac = calculate_hmac(api_secret, params)
    if not hmac_to_check:
        return False
    return hmac.compare_digest(our_hmac.encode("utf8"), hmac_to_check.encode("utf8"))
