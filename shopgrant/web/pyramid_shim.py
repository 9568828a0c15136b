import logging
from dataclasses import dataclass, field

from pyramid.httpexceptions import HTTPFound
from pyramid.request import Request
from pyramid.response import Response
from webob.cookies import SignedSerializer
import zope.interface

from ..interfaces import IWebShim

logger = logging.getLogger(__name__)


def get_default_signed_serializer(secret, salt, hashalg="sha512", serializer=None):
    return SignedSerializer(secret, salt, hashalg, serializer=serializer)


@dataclass
class PyramidWebShimConfig:
    auth_callback_route: str
    home_route: str
    # This is used to sign cookies.
    cookie_secret: str
    # Only turn off for local plain http development.
    secure_cookies: bool = True


@zope.interface.implementer(IWebShim)
@dataclass
class PyramidWebShim:
    """Shim between the oauth handshake and pyramid for web tasks."""

    # Config params that describe how we should behave.
    config: PyramidWebShimConfig
    # The current request.
    request: Request
    # Factory taking (secret, salt), returns an object with dumps/loads.
    signed_serializer: object = field(default=get_default_signed_serializer)

    def _serializer(self, name):
        # Salt with the cookie name so one cookie can't be swapped for another.
        return self.signed_serializer(self.config.cookie_secret, name)

    def set_cookie(self, name, value, signed=True, max_age=None):
        if signed:
            value = self._serializer(name).dumps(value).decode("ascii")
        # set_cookie overwrites any value set earlier in this request.
        self.request.response.set_cookie(
            name,
            value,
            max_age=max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self.config.secure_cookies,
            overwrite=True,
        )

    def get_cookie(self, name, signed=True, default=None):
        if name not in self.request.cookies:
            return default
        value = self.request.cookies[name]
        if not value:
            return default
        if not signed:
            return value
        try:
            return self._serializer(name).loads(value)
        except ValueError:
            logger.warning(f"Cookie {name} failed signature check, ignoring it.")
            return default

    def delete_cookie(self, name):
        self.set_cookie(name, "", signed=False, max_age=0)

    def _route_url(self, route_name, get_params, path_only=False, **kwargs):
        if get_params:
            kwargs.setdefault("_query", {}).update(get_params)
        if path_only:
            return self.request.route_path(route_name, **kwargs)
        else:
            return self.request.route_url(route_name, **kwargs)

    def get_home_url(self, get_params=None, path_only=False):
        return self._route_url(self.config.home_route, get_params, path_only=path_only)

    def get_auth_callback_url(self, get_params=None):
        return self._route_url(self.config.auth_callback_route, get_params)

    def _cookie_headers(self):
        return [
            (name, value)
            for name, value in self.request.response.headerlist
            if name.lower() == "set-cookie"
        ]

    def redirect_302_url(self, url, with_headers=True):
        kwargs = {}
        if with_headers:
            kwargs["headers"] = self._cookie_headers()
        return HTTPFound(url, **kwargs)

    def get_param(self, name, default=None):
        return self.request.GET.get(name, default)

    def get_params(self, param_names=None, default=None):
        if param_names:
            params = {name: self.request.GET.get(name, default) for name in param_names}
        else:
            params = self.request.GET.copy()
        return params

    def response_200_string(self, content, content_type="text/html"):
        response = self.request.response
        response.content_type = content_type
        response.text = content
        return response

    def response_error(self, error, keep_cookies=True):
        """Render a ShopGrantError as json, with any cookies already set."""
        response = Response(status=error.status_code, json_body=error.as_dict())
        if keep_cookies:
            for name, value in self._cookie_headers():
                response.headers.add(name, value)
        return response
