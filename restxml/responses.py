"""Response classes, which map an XML document to typed attributes.

A response class describes where each value can be found:

.. code-block:: python

    class Photo(BaseResponse):
        id = Param(type=int, source="attribute")
        title = Param(source="attribute")

    class PhotoList(BaseResponse):
        stat = Param(source="attribute", required=True)
        photos = Param(path="photos/photo", collection_of=Photo)

        def is_successful(self):
            return self.stat == "ok"

    response = PhotoList.from_string(xml_body)
    for photo in response.photos:
        print(photo.id, photo.title)

Values are resolved on first access and cached afterwards.
The underlying document is never changed.
"""

from __future__ import annotations

from collections.abc import Mapping

from restxml.exceptions import ImproperlyConfigured, MissingParameterValue, wrap_parser_errors
from restxml.params import ABSENT, Param, ParamHolder, TemplateDefaults
from restxml.parsers.xml import DocumentNode, parse_xml_from_string
from restxml.types import ParamSource, ParamType

__all__ = (
    "BaseResponse",
    "parse_response",
)


class BaseResponse(ParamHolder):
    """The base class for all responses.

    Each instance wraps a single node of the parsed document.
    The values of a template (see :meth:`set_template`) are used
    for optional parameters that are missing in the document.
    """

    reserved_names = ("root", "status_code")

    def __init__(
        self,
        root: DocumentNode,
        *,
        status_code: int | None = None,
        defaults: TemplateDefaults | Mapping | None = None,
        templates: dict | None = None,
    ):
        """
        :param root: The XML node that all paths are relative to.
        :param status_code: The HTTP status code, if this is the top-level response.
        :param defaults: Replacement for the class template.
        :param templates: The template values of this class and its nested classes,
            as taken by the parent response. A new snapshot is taken when omitted.
        """
        if templates is None or self.__class__ not in templates:
            templates = {**self._snapshot_templates(), **(templates or {})}
        if defaults is None:
            defaults = templates[self.__class__]
        if isinstance(defaults, TemplateDefaults):
            defaults = defaults.as_dict()

        self.root = root
        self.status_code = status_code
        self._defaults = dict(defaults)
        self._templates = templates
        self._values = {}

    def __repr__(self):
        tag = getattr(self.root, "tag", None) or self.root.__class__.__name__
        return f"<{self.__class__.__name__}: <{tag}>>"

    @classmethod
    def _snapshot_templates(cls) -> dict:
        """Copy the templates of this class, and of every nested class it can reach.

        Nested responses are constructed on first access, so they need the
        template values that were active when the top-level response was created.
        """
        templates = {}
        pending = [cls]
        while pending:
            response_class = pending.pop()
            if response_class in templates:
                continue

            templates[response_class] = response_class.template.as_dict()
            pending.extend(
                param.nested_class
                for param in response_class.get_params().values()
                if param.nested_class is not None
            )
        return templates

    @classmethod
    def from_xml(cls, root: DocumentNode, **kwargs) -> BaseResponse:
        """Initialize the response from a parsed XML node."""
        return cls(root, **kwargs)

    @classmethod
    def from_string(cls, xml_string: str | bytes, **kwargs) -> BaseResponse:
        """Parse the XML body, and initialize the response from its root element."""
        return cls.from_xml(parse_xml_from_string(xml_string), **kwargs)

    @classmethod
    def _validate_param(cls, param: Param):
        if param.prefix:
            raise ImproperlyConfigured(
                f"Response parameter '{param.name}' can't have a prefix.", parameter=param.name
            )

        nested_class = param.nested_class
        if nested_class is None:
            return

        if not isinstance(nested_class, type) or not issubclass(nested_class, BaseResponse):
            raise ImproperlyConfigured(
                f"Parameter '{param.name}' should refer to a BaseResponse subclass,"
                f" not {nested_class!r}.",
                parameter=param.name,
            )
        if param.source is not ParamSource.element:
            raise ImproperlyConfigured(
                f"Parameter '{param.name}' reads elements, it can't use source={param.source}.",
                parameter=param.name,
            )

    def is_successful(self) -> bool:
        """Tell whether the API reported success.

        Subclasses override this to check the API-specific status,
        as many APIs return an error message with an HTTP 200 status.
        """
        return True

    def get(self, name: str):
        """Read the value of a parameter, giving ``ABSENT`` when there is none.

        :raises ValueCoercionError: When the value can't be converted to the declared type.
        :raises MissingParameterValue: When a required value is missing.
        """
        try:
            return self._values[name]
        except KeyError:
            pass

        param = self.get_param(name)
        if param is None:
            return ABSENT

        value = self._resolve(param)
        self._values[name] = value
        return value

    def _resolve(self, param: Param):
        """Find the value of a parameter in the document."""
        if param.is_collection:
            nodes = self.root.children(param.path)
            if not nodes:
                return self._get_missing(param)
            return tuple(
                param.collection_of.from_xml(node, templates=self._templates) for node in nodes
            )

        if param.source is ParamSource.attribute:
            # The last path segment is the attribute, the rest finds the element.
            element_path, _, attribute_name = param.path.rpartition("/")
            node = self._find_node(element_path) if element_path else self.root
            raw_value = node.attribute(attribute_name.lstrip("@")) if node is not None else None
        else:
            node = self._find_node(param.path)
            if node is not None and param.node_of is not None:
                return param.node_of.from_xml(node, templates=self._templates)
            raw_value = node.get_text() if node is not None else None

        # Empty elements don't have a value, unless strings are expected.
        if raw_value is None or (raw_value == "" and param.type is not ParamType.string):
            return self._get_missing(param)

        with wrap_parser_errors(param.name, raw_value):
            return param.type.to_python(raw_value)

    def _find_node(self, path: str) -> DocumentNode | None:
        nodes = self.root.children(path)
        return nodes[0] if nodes else None

    def _get_missing(self, param: Param):
        if param.required:
            raise MissingParameterValue(
                f"Missing required '{param.name}' value at '{param.path}'.", parameter=param.name
            )

        value = self._defaults.get(param.name, ABSENT)
        if value is ABSENT:
            value = param.default
        if param.is_collection and value is ABSENT:
            value = ()
        return value

    def as_dict(self) -> dict:
        """Resolve all parameters into a dictionary.
        Nested responses are translated too, parameters without value are left out.
        """
        data = {}
        for name in self.get_params():
            value = self.get(name)
            if value is ABSENT:
                continue
            elif isinstance(value, BaseResponse):
                value = value.as_dict()
            elif isinstance(value, tuple) and self.get_param(name).is_collection:
                value = [item.as_dict() for item in value]
            data[name] = value
        return data


def parse_response(
    response_class: type[BaseResponse],
    xml_string: str | bytes,
    parse_document=parse_xml_from_string,
    **kwargs,
) -> BaseResponse:
    """Parse the XML body into the given response class.

    :param response_class: The class that describes the response.
    :param xml_string: The raw response body.
    :param parse_document: The function that parses the body into a tree of nodes.
    """
    if not isinstance(response_class, type) or not issubclass(response_class, BaseResponse):
        raise ImproperlyConfigured(f"{response_class!r} is not a BaseResponse subclass.")

    root = parse_document(xml_string)
    return response_class.from_xml(root, **kwargs)
