"""Request classes, which render their parameters as URL query string.

A request class lists the parameters that an API call accepts:

.. code-block:: python

    class FlickrRequest(BaseRequest):
        method = Param()
        api_key = Param()

    class PhotoSearch(FlickrRequest):
        tags = Param()
        per_page = Param(type=int)

    FlickrRequest.set_template("api_key", settings.FLICKR_API_KEY)

    PhotoSearch(method="flickr.photos.search", tags="relax", per_page=10).render()

Another request can be used as parameter value. Its parameters are merged into the
query string of the outer request, optionally with the ``prefix`` of that parameter.
When two parameters end up with the same name, this raises :class:`ImproperlyConfigured`
instead of letting one value silently replace the other.
"""

from __future__ import annotations

from collections.abc import Mapping

from django.utils.http import urlencode

from restxml.exceptions import ImproperlyConfigured
from restxml.params import ABSENT, Param, ParamHolder, TemplateDefaults, ValueStore

__all__ = (
    "BaseRequest",
    "build_url",
)


class BaseRequest(ParamHolder):
    """The base class for all requests.

    The values are given as keyword arguments, and combined with the defaults
    from the class template (see :meth:`set_template`).
    """

    reserved_names = ("defaults",)

    def __init__(self, defaults: TemplateDefaults | Mapping | None = None, **params):
        """
        :param defaults: Replacement for the class template, e.g. to use different credentials.
        :param params: The parameter values.
        """
        known_params = self.get_params()
        for name in params:
            if name not in known_params:
                raise TypeError(
                    f"{self.__class__.__name__}() got an unexpected keyword argument '{name}'"
                )

        if defaults is None:
            defaults = self.template
        if isinstance(defaults, TemplateDefaults):
            defaults = defaults.as_dict()

        # Declared defaults < template < given values.
        declared = {
            name: param.default
            for name, param in known_params.items()
            if param.default is not ABSENT
        }
        self._store = ValueStore({**declared, **defaults}, params)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._store.as_dict()!r}>"

    def __eq__(self, other):
        if not isinstance(other, BaseRequest):
            return NotImplemented
        return self.__class__ is other.__class__ and self._given_values() == other._given_values()

    __hash__ = None

    def _given_values(self) -> dict:
        return {
            name: value
            for name in self.get_params()
            if (value := self._store.get(name)) is not ABSENT and value is not None
        }

    @classmethod
    def _validate_param(cls, param: Param):
        if param.nested_class is not None:
            raise ImproperlyConfigured(
                f"Request parameter '{param.name}' can't use 'collection_of' or 'node_of'.",
                parameter=param.name,
            )

    def get(self, name: str):
        """Read the value of a parameter, giving ``ABSENT`` when there is none."""
        return self._store.get(name)

    def set(self, name: str, value):
        """Change the value of a parameter. Assigning ``ABSENT`` removes the value."""
        if name not in self.get_params():
            raise AttributeError(f"{self.__class__.__name__} has no parameter '{name}'")
        self._store.set(name, value)

    def replace(self, **params) -> BaseRequest:
        """Create a copy of this request with some values changed."""
        known_params = self.get_params()
        values = {
            name: value for name, value in self._store.as_dict().items() if name in known_params
        }
        return self.__class__(defaults={}, **{**values, **params})

    def as_kvp(self) -> list[tuple[str, str]]:
        """Provide the Key-Value-Pairs (KVP) of the query string, in declaration order."""
        pairs = {}
        for name, param in self.get_params().items():
            value = self._store.get(name)
            if value is ABSENT or value is None:
                if param.required:
                    raise ImproperlyConfigured(
                        f"Missing required {self.__class__.__name__}.{name} parameter.",
                        parameter=name,
                    )
                continue

            if isinstance(value, BaseRequest):
                # Flatten the nested request in this request.
                for key, text in value.as_kvp():
                    self._add_pair(pairs, f"{param.prefix}{key}", text, source=name)
            else:
                self._add_pair(pairs, name, self._format_value(param, value), source=name)

        return list(pairs.items())

    def _format_value(self, param: Param, value) -> str:
        try:
            return param.type.to_text(value)
        except ImproperlyConfigured as e:
            raise ImproperlyConfigured(
                f"{self.__class__.__name__}.{param.name}: {e}", parameter=param.name
            ) from e

    def _add_pair(self, pairs: dict, key: str, text: str, source: str):
        if key in pairs:
            raise ImproperlyConfigured(
                f"{self.__class__.__name__}.{source} renders the '{key}' parameter,"
                " which is already given by another parameter.",
                parameter=source,
            )
        pairs[key] = text

    def render(self) -> str:
        """Render the parameters as URL-encoded query string (without a leading ``?``)."""
        return urlencode(self.as_kvp())


def build_url(endpoint: str, query_string: str) -> str:
    """Join the service endpoint and query string."""
    if not query_string:
        return endpoint
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{query_string}"
