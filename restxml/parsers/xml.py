"""XML parsing for all incoming responses.

This logic uses the etree logic from the standard library,
with some extra extensions to expose the original namespace aliases.
Using defusedxml, entity expansion attacks from remote servers are prevented.

The response classes only depend on the small :class:`DocumentNode` interface.
Any other parser can be used by the :class:`~restxml.services.Service`,
as long as its nodes provide the same methods.
"""

from __future__ import annotations

import logging
import typing
from xml.etree.ElementTree import Element, QName, TreeBuilder

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import DefusedXMLParser, ParseError

from restxml import conf
from restxml.exceptions import ExternalParsingError

logger = logging.getLogger(__name__)

__all__ = (
    "DocumentNode",
    "NSElement",
    "parse_xml_from_string",
    "parse_qname",
    "split_ns",
)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


class DocumentNode(typing.Protocol):
    """The capabilities a parsed XML node needs to offer to the response parser."""

    def attribute(self, name: str) -> str | None:
        """Return the attribute value, or ``None`` when it doesn't exist."""

    def children(self, path: str) -> list[DocumentNode]:
        """Return all elements at a slash-separated path, in document order."""

    def get_text(self) -> str | None:
        """Return the text content of the element."""


class NSElement(Element):
    """Custom XML element, which also exposes its original namespace aliases.

    That information is needed to resolve prefixed names in declared paths.
    For example, ``atom:entry`` resolves to ``{http://www.w3.org/2005/Atom}entry``
    when the document declared ``xmlns:atom="http://www.w3.org/2005/Atom"``.
    An unprefixed path uses the default namespace of the document, if there is one.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.ns_aliases = {}  # assigned by NSTreeBuilder, in {prefix: uri} format.

    def attribute(self, name: str) -> str | None:
        """Retrieve an attribute, resolving a ``prefix:name`` notation."""
        if ":" in name:
            name = parse_qname(name, {"xml": XML_NAMESPACE, **self.ns_aliases})
        return self.attrib.get(name)

    def children(self, path: str) -> list[NSElement]:
        """Find the elements at the given path, relative to this node.

        A leading ``/`` is ignored, so ``/photos/photo`` reads the same as ``photos/photo``.
        A leading ``//`` searches all descendants.
        """
        if path.startswith("//"):
            path = f".{path}"
        else:
            path = path.lstrip("/")

        if not path or path == ".":
            return [self]

        try:
            return self.findall(path, namespaces=self.ns_aliases)
        except SyntaxError as e:
            # ElementPath raises SyntaxError for bad paths or unknown prefixes.
            raise ExternalParsingError(f"Can't resolve path '{path}': {e}") from e

    def get_text(self) -> str:
        """Provide the text content, stripped when :data:`conf.RESTXML_STRIP_TEXT` is set.
        Text of child elements is included, so ``<p>a <b>b</b></p>`` gives "a b".
        """
        value = "".join(self.itertext())
        if conf.RESTXML_STRIP_TEXT:
            value = value.strip()
        return value

    @property
    def qname(self) -> str:
        """Provide the tag name in its original short format"""
        ns, localname = split_ns(self.tag)
        if ns:
            for prefix, full_ns in self.ns_aliases.items():
                if full_ns == ns:
                    return f"{prefix}:{localname}" if prefix else localname
        return localname

    if typing.TYPE_CHECKING:
        # Make sure the type checking knows the actual type of the elements.
        def find(self, path: str, namespaces: dict[str, str] | None = None) -> NSElement | None:
            return super().find(path, namespaces)

        def findall(self, path: str, namespaces: dict[str, str] | None = None) -> list[NSElement]:
            return super().findall(path, namespaces)

        def __iter__(self) -> typing.Iterator[NSElement]:
            return super().__iter__()


def parse_qname(qname: str, ns_aliases: dict[str, str]) -> str:
    """Resolve the QName aliases.

    For example, ``media:title`` will be resolved to ``{http://search.yahoo.com/mrss/}title``
    when the document declared the ``media`` alias for it.
    """
    prefix, _, localname = qname.rpartition(":")
    if not prefix:
        return localname

    try:
        uri = ns_aliases[prefix]
    except KeyError:
        logger.debug("Can't resolve QName '%s', available namespaces: %r", qname, ns_aliases)
        raise ExternalParsingError(
            f"Can't resolve QName '{qname}', an XML namespace declaration is missing."
        ) from None

    return QName(uri, localname).text


class NSTreeBuilder(TreeBuilder):
    """Custom TreeBuilder to track namespaces."""

    def __init__(self, **kwargs):
        super().__init__(element_factory=NSElement, **kwargs)
        # A new stack level is added directly, as start_ns() is called before start()
        self.ns_stack = [{}]

    def start(self, tag, attrs):
        element = super().start(tag, attrs)
        # Assigned at the start, so the element is complete when it's passed to children.
        element.ns_aliases = self._flatten_ns()
        self.ns_stack.append({})  # reserve stack for child tags
        return element

    def start_ns(self, prefix, uri):
        self.ns_stack[-1][prefix] = uri

    def end(self, tag) -> Element:
        element = super().end(tag)
        self.ns_stack.pop()  # clear reservation for child tags
        return element

    def _flatten_ns(self) -> dict:
        result = {}
        for level in self.ns_stack:
            result.update(level)
        return result


def parse_xml_from_string(xml_string: str | bytes) -> NSElement:
    """Provide a safe and consistent way for parsing XML.

    This uses a custom parser, so namespace aliases can be tracked.
    All elements also have an :attr:`ns_aliases` attribute that exposes
    the original alias that was used for the namespace.
    """
    # Passing a custom parser potentially circumvents defusedxml,
    # so note the parser is again configured in the same way:
    parser = DefusedXMLParser(
        target=NSTreeBuilder(),
        forbid_dtd=True,
        forbid_entities=True,
        forbid_external=True,
    )

    # Servers often add a newline before the <?xml ...?> declaration, which expat refuses.
    xml_string = xml_string.lstrip()
    if isinstance(xml_string, str) and xml_string.startswith("<?"):
        xml_string = xml_string[xml_string.find("?>") + 2 :]

    try:
        parser.feed(xml_string)
        return parser.close()
    except (ParseError, DefusedXmlException) as e:
        # Offer consistent results for callers to check for invalid data.
        logger.debug("Parsing XML error: %s: %s", e, xml_string)
        raise ExternalParsingError(str(e)) from e


def split_ns(xml_name: str) -> tuple[str | None, str]:
    """Split the element tag or attribute/text value into the namespace and
    local name. The stdlib etree doesn't have the properties for this (lxml does).
    """
    # Tags may start with a `{ns}`
    if xml_name.startswith("{"):
        end = xml_name.index("}")
        return xml_name[1:end], xml_name[end + 1 :]
    else:
        return None, xml_name
