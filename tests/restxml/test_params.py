import pickle

import pytest

from restxml.exceptions import ImproperlyConfigured
from restxml.params import ABSENT, Param, TemplateDefaults, ValueStore
from restxml.requests import BaseRequest
from restxml.responses import BaseResponse
from restxml.types import ParamSource, ParamType


class TestAbsent:
    """Prove the absent marker can't be confused with other falsy values."""

    def test_falsy(self):
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"

    def test_distinct(self):
        for value in (None, 0, False, "", ()):
            assert value is not ABSENT
            assert value != ABSENT

    def test_singleton(self):
        assert pickle.loads(pickle.dumps(ABSENT)) is ABSENT


class TestRegistry:
    """Prove that declarations are inherited, and overrides stay local to the class."""

    def test_declaration_order(self):
        class Search(BaseRequest):
            method = Param()
            api_key = Param()
            tags = Param()

        assert list(Search.get_params()) == ["method", "api_key", "tags"]
        assert Search.get_param("tags").name == "tags"
        assert Search.get_param("unknown") is None

    def test_inherited(self):
        class Parent(BaseRequest):
            method = Param()

        class Child(Parent):
            tags = Param()

        assert list(Parent.get_params()) == ["method"]
        assert list(Child.get_params()) == ["method", "tags"]

    def test_override_replaces_options(self):
        """A redeclaration in a subclass fully replaces the parent options."""

        class Parent(BaseResponse):
            tags = Param(type=int, source="attribute", required=True)

        class Child(Parent):
            tags = Param(path="tags/tag", type="list")

        child_param = Child.get_param("tags")
        assert child_param.type is ParamType.list
        assert child_param.source is ParamSource.element
        assert child_param.path == "tags/tag"
        assert child_param.required is False

        # The parent is not affected
        parent_param = Parent.get_param("tags")
        assert parent_param.type is ParamType.integer
        assert parent_param.source is ParamSource.attribute
        assert parent_param.required is True

    def test_override_keeps_position(self):
        class Parent(BaseRequest):
            method = Param()
            tags = Param()

        class Child(Parent):
            extras = Param()
            method = Param(default="flickr.photos.search")

        assert list(Child.get_params()) == ["method", "tags", "extras"]

    def test_declare(self):
        class Parent(BaseRequest):
            method = Param()

        class Child(Parent):
            pass

        class Sibling(Parent):
            pass

        param = Child.declare("tags", type=list)
        assert param.type is ParamType.list
        assert Child.tags is param
        assert list(Child.get_params()) == ["method", "tags"]
        assert list(Parent.get_params()) == ["method"]
        assert list(Sibling.get_params()) == ["method"]

    def test_declare_twice(self):
        """Last write wins, there is no error for redeclaring a parameter."""

        class Search(BaseResponse):
            pass

        Search.declare("page", type=int)
        Search.declare("page", type=str, source="attribute")
        assert Search.get_param("page").type is ParamType.string
        assert Search.get_param("page").source is ParamSource.attribute
        assert list(Search.get_params()) == ["page"]

    def test_declare_parent_after_child(self):
        """The cache of effective parameters is refreshed when a parent changes."""

        class Parent(BaseRequest):
            pass

        class Child(Parent):
            pass

        assert list(Child.get_params()) == []
        Parent.declare("method")
        assert list(Child.get_params()) == ["method"]

    def test_multiple_inheritance(self):
        class Paging(BaseRequest):
            page = Param(type=int)
            per_page = Param(type=int)

        class Search(BaseRequest):
            tags = Param()

        class PagedSearch(Search, Paging):
            pass

        assert list(PagedSearch.get_params()) == ["page", "per_page", "tags"]

    def test_multiple_inheritance_templates(self):
        """Templates of every base class reach the subclass, in MRO order."""

        class Paging(BaseRequest):
            per_page = Param(type=int)

        class Search(BaseRequest):
            tags = Param()
            per_page = Param(type=int)

        class PagedSearch(Search, Paging):
            pass

        Paging.set_template("per_page", 50)
        assert Paging().per_page == 50
        assert PagedSearch().per_page == 50

        Search.set_template("tags", "relax")
        assert PagedSearch().tags == "relax"

        # Search comes first in the MRO
        Search.set_template("per_page", 10)
        assert PagedSearch().per_page == 10
        assert PagedSearch.template.as_dict() == {"per_page": 10, "tags": "relax"}

        PagedSearch.set_template("per_page", 20)
        assert PagedSearch().per_page == 20
        assert Paging().per_page == 50

    def test_diamond_templates(self):
        class Api(BaseRequest):
            api_key = Param()

        class Left(Api):
            pass

        class Right(Api):
            pass

        class Both(Left, Right):
            pass

        Api.set_template("api_key", "KEY")
        assert Both().api_key == "KEY"

        Right.set_template("api_key", "RIGHT")
        assert Both().api_key == "RIGHT"

    def test_effective_registry_read_only(self):
        class Search(BaseRequest):
            tags = Param()

        with pytest.raises(TypeError):
            Search.get_params()["foo"] = Param("foo")


class TestDeclarationErrors:
    """Prove that invalid declarations are reported when the class is declared."""

    def test_unknown_type(self):
        with pytest.raises(ImproperlyConfigured, match="Unknown parameter type"):
            Param(type="geometry")

    def test_hides_method(self):
        with pytest.raises(ImproperlyConfigured, match="would hide the BaseResponse.is_successful"):

            class Response(BaseResponse):
                is_successful = Param()

    def test_reserved_name(self):
        with pytest.raises(ImproperlyConfigured, match="reserved name"):
            BaseResponse.declare("root")

        with pytest.raises(ImproperlyConfigured, match="reserved name"):

            class Request(BaseRequest):
                defaults = Param()

    def test_private_name(self):
        class Request(BaseRequest):
            pass

        with pytest.raises(ImproperlyConfigured, match="Invalid parameter name"):
            Request.declare("_secret")

    def test_both_nested_options(self):
        class Photo(BaseResponse):
            pass

        with pytest.raises(ImproperlyConfigured, match="both 'collection_of' and 'node_of'"):
            Param("photo", collection_of=Photo, node_of=Photo)


class TestTemplateDefaults:
    """Prove the lookup logic of templates"""

    def test_parent_fallback(self):
        parent = TemplateDefaults({"api_key": "KEY", "format": "rest"})
        child = TemplateDefaults({"format": "xml"}, parents=[parent])
        assert child.get("api_key") == "KEY"
        assert child.get("format") == "xml"
        assert child.get("missing") is ABSENT
        assert child.as_dict() == {"api_key": "KEY", "format": "xml"}
        assert "api_key" in child

    def test_clear(self):
        template = TemplateDefaults({"api_key": "KEY"})
        template.clear("api_key")
        template.clear("api_key")  # no error
        assert "api_key" not in template


class TestValueStore:
    def test_overrides_win(self):
        store = ValueStore({"api_key": "KEY", "tags": "a"}, {"tags": "b"})
        assert store.get("api_key") == "KEY"
        assert store.get("tags") == "b"
        assert store.get("missing") is ABSENT

    def test_snapshot(self):
        template = TemplateDefaults({"api_key": "KEY"})
        store = ValueStore(template)
        template.set("api_key", "OTHER")
        assert store.get("api_key") == "KEY"

    def test_set_absent(self):
        store = ValueStore({}, {"tags": "a"})
        store.set("tags", ABSENT)
        assert "tags" not in store
