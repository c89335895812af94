"""Declaration of the parameters that requests and responses accept.

Request and response classes declare their parameters in the class body:

.. code-block:: python

    class PhotoSearch(BaseRequest):
        method = Param(default="flickr.photos.search")
        tags = Param(type=list)
        per_page = Param(type=int)

or afterwards, using ``PhotoSearch.declare("per_page", type=int)``.

Each class holds only its own declarations. The effective set of parameters is
computed by folding the declarations of all base classes, where a subclass
declaration replaces all options of the parent declaration with the same name.
The result is cached per class, and the cache is reset whenever a class declares
a new parameter. Declaring a parameter on a subclass never changes the parent class.

Class-level default values are held in a :class:`TemplateDefaults` object.
These values are copied into each instance at construction. Note these templates
are process-wide state: configure them at startup, before requests are created
in other threads.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from restxml.exceptions import ImproperlyConfigured
from restxml.types import ParamSource, ParamType

logger = logging.getLogger(__name__)

__all__ = (
    "ABSENT",
    "Param",
    "ParamHolder",
    "TemplateDefaults",
    "ValueStore",
)


class _Absent:
    """Marker for a parameter that has no value.

    This is falsy, but distinguishable from ``None``, ``0``, ``False`` and ``""``
    by checking ``value is ABSENT``.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "ABSENT"

    def __reduce__(self):
        return "ABSENT"


#: The value of parameters that were not given, or not found in the response.
ABSENT = _Absent()


class Param:
    """The declaration of a single parameter.

    As class attribute, this also works as descriptor:
    reading ``instance.name`` returns the value of the parameter.
    """

    def __init__(
        self,
        name: str | None = None,
        *,
        type: ParamType | str | type = ParamType.string,
        source: ParamSource | str = ParamSource.element,
        path: str | None = None,
        collection_of: type | str | None = None,
        node_of: type | str | None = None,
        required: bool = False,
        default=ABSENT,
        prefix: str = "",
    ):
        """
        :param name: The name of the parameter, assigned automatically as class attribute.
        :param type: The value type, used to convert the values.
        :param source: Whether a response reads the value from an element or attribute.
        :param path: The location in the response, relative to the root. Defaults to the name.
        :param collection_of: The response class to construct for every matched element.
        :param node_of: The response class to construct for a single matched element.
        :param required: Whether a missing response value is an error.
        :param default: The value used when the value is missing.
        :param prefix: For nested requests, the prefix for all flattened names.
        """
        if collection_of is not None and node_of is not None:
            raise ImproperlyConfigured(
                f"Parameter '{name}' can't have both 'collection_of' and 'node_of'.",
                parameter=name,
            )

        self.name = name
        self.type = ParamType.from_option(type)
        self.source = ParamSource.from_option(source)
        self._path = path
        self.collection_of = collection_of
        self.node_of = node_of
        self.required = required
        self.default = default
        self.prefix = prefix

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.name}, type={self.type}, source={self.source}>"

    def __set_name__(self, owner, name):
        if self.name is None:
            self.name = name
        elif self.name != name:
            raise ImproperlyConfigured(
                f"Parameter '{self.name}' is assigned to a different attribute '{name}'.",
                parameter=self.name,
            )

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance, value):
        instance.set(self.name, value)

    @property
    def path(self) -> str:
        """The path of the element, relative to the response root."""
        return self._path or self.name

    @property
    def nested_class(self) -> type | None:
        """The response class that matched elements are converted into."""
        return self.collection_of or self.node_of

    @property
    def is_collection(self) -> bool:
        return self.collection_of is not None

    @property
    def options(self) -> dict:
        """The options of this declaration, as they would be passed to :meth:`declare`."""
        return {
            "type": self.type,
            "source": self.source,
            "path": self._path,
            "collection_of": self.collection_of,
            "node_of": self.node_of,
            "required": self.required,
            "default": self.default,
            "prefix": self.prefix,
        }

    def replace(self, **options) -> Param:
        """Create a copy with some options replaced."""
        return self.__class__(self.name, **{**self.options, **options})


#: Cache of the effective parameters per class.
_EFFECTIVE_PARAMS = {}


class TemplateDefaults:
    """Default values for parameters, copied into every newly constructed instance.

    Each request/response class has one at ``cls.template``. Their values also
    apply to subclasses, unless the subclass template overrides the name.
    A separate object can also be passed to a single constructor call.

    The ``parents`` are consulted in the given order, which is the MRO for
    class templates. Only their own values are read, not those of their parents.
    """

    def __init__(self, values: Mapping | None = None, parents=()):
        self._values = dict(values or {})
        self.parents = tuple(parents)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.as_dict()!r}>"

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not ABSENT

    def set(self, name: str, value):
        """Change the default for all future instances."""
        self._values[name] = value

    def clear(self, name: str):
        """Remove the default value."""
        self._values.pop(name, None)

    def get(self, name: str, default=ABSENT):
        """Retrieve a default value, falling back to the parent templates."""
        for template in (self, *self.parents):
            try:
                return template._values[name]
            except KeyError:
                continue
        return default

    def as_dict(self) -> dict:
        """Provide all defaults, including those of the parent templates."""
        values = {}
        for template in reversed((self, *self.parents)):
            values.update(template._values)
        return values


class ValueStore:
    """The values of a single instance.

    This is a snapshot of the template defaults, combined with the values
    given to the constructor. The instance values win on conflicts.
    """

    def __init__(self, template: TemplateDefaults | Mapping | None = None, overrides=None):
        if isinstance(template, TemplateDefaults):
            template = template.as_dict()
        self._values = {**(template or {}), **(overrides or {})}

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._values!r}>"

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __eq__(self, other):
        if not isinstance(other, ValueStore):
            return NotImplemented
        return self._values == other._values

    def get(self, name: str):
        """Read a value, returning ``ABSENT`` when there is none."""
        return self._values.get(name, ABSENT)

    def set(self, name: str, value):
        if value is ABSENT:
            self._values.pop(name, None)
        else:
            self._values[name] = value

    def as_dict(self) -> dict:
        return dict(self._values)


class ParamHolder:
    """The base for all classes that declare parameters.

    This provides the registry logic for both requests and responses.
    """

    #: The parameters declared on this exact class, in declaration order.
    _declared_params: dict[str, Param] = {}

    #: Extra names that can't be used as parameter name.
    reserved_names = ()

    #: The class-level defaults, a new object is assigned for every subclass.
    template: TemplateDefaults = TemplateDefaults()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        # Each class level has a fresh registry, and a template that falls back to
        # the templates of all base classes, in MRO order.
        cls._declared_params = {}
        cls.template = TemplateDefaults(
            parents=[
                vars(base)["template"] for base in cls.__mro__[1:] if "template" in vars(base)
            ]
        )

        for attr_name, value in list(vars(cls).items()):
            if isinstance(value, Param):
                cls._add_param(value)

        _EFFECTIVE_PARAMS.clear()

    @classmethod
    def declare(cls, name: str, **options) -> Param:
        """Declare a parameter on this class.

        Declaring the same name again replaces all previous options.
        """
        param = Param(name, **options)
        cls._add_param(param)
        setattr(cls, name, param)  # install descriptor
        _EFFECTIVE_PARAMS.clear()
        return param

    @classmethod
    def _add_param(cls, param: Param):
        name = param.name
        if not name or name.startswith("_") or not name.isidentifier():
            raise ImproperlyConfigured(f"Invalid parameter name: {name!r}", parameter=name)

        if name in cls.reserved_names:
            raise ImproperlyConfigured(
                f"Parameter '{name}' uses a reserved name of {cls.__name__}.", parameter=name
            )

        for klass in cls.__mro__:
            existing = vars(klass).get(name)
            if existing is not None and not isinstance(existing, Param):
                raise ImproperlyConfigured(
                    f"Parameter '{name}' would hide the {klass.__name__}.{name} attribute.",
                    parameter=name,
                )

        if param.collection_of == "self":
            param = param.replace(collection_of=cls)
        if param.node_of == "self":
            param = param.replace(node_of=cls)

        cls._validate_param(param)
        cls._declared_params[name] = param

    @classmethod
    def _validate_param(cls, param: Param):
        """Check whether the parameter options are supported by this class."""

    @classmethod
    def get_params(cls) -> Mapping[str, Param]:
        """Provide the effective parameters, including all inherited declarations."""
        try:
            return _EFFECTIVE_PARAMS[cls]
        except KeyError:
            params = {}
            for klass in reversed(cls.__mro__):
                params.update(vars(klass).get("_declared_params", {}))

            params = MappingProxyType(params)
            _EFFECTIVE_PARAMS[cls] = params
            return params

    @classmethod
    def get_param(cls, name: str) -> Param | None:
        return cls.get_params().get(name)

    @classmethod
    def set_template(cls, name: str, value):
        """Set a default value for every instance that is constructed from now on.

        Existing instances are not affected. This is process-wide state,
        so configure it before instances are created in multiple threads.
        """
        logger.debug("Setting template %s.%s", cls.__name__, name)
        cls.template.set(name, value)

    @classmethod
    def clear_template(cls, name: str):
        """Remove a default value that :meth:`set_template` assigned."""
        cls.template.clear(name)

    def get(self, name: str):
        """Read the value of a parameter, giving ``ABSENT`` when there is none."""
        raise NotImplementedError()

    def set(self, name: str, value):
        raise AttributeError(f"{self.__class__.__name__} parameters are read-only.")
