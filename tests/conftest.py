import django
import pytest

from restxml import conf
from restxml.parsers.xml import parse_xml_from_string
from tests.utils import FLICKR_ERROR_XML, FLICKR_SEARCH_XML, PHOTOS_XML, FakeTransport


def pytest_configure():
    print(f"Running with Django {django.__version__}")
    print(f"Using RESTXML_STRIP_TEXT={conf.RESTXML_STRIP_TEXT}")


@pytest.fixture()
def photos_root():
    return parse_xml_from_string(PHOTOS_XML)


@pytest.fixture()
def search_root():
    return parse_xml_from_string(FLICKR_SEARCH_XML)


@pytest.fixture()
def search_transport() -> FakeTransport:
    return FakeTransport(FLICKR_SEARCH_XML.encode())


@pytest.fixture()
def error_transport() -> FakeTransport:
    return FakeTransport(FLICKR_ERROR_XML.encode())
