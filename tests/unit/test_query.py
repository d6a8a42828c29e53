"""Unit tests for the query/matcher engine."""

from __future__ import annotations

import pytest

from kraph.errors import InvalidQueryError
from kraph.query import MATCH_ANY, Entity, Query, funcs
from kraph.query.query import FIELDS
from kraph.uid import UID

# ---------------------------------------------------------------------------
# Comparison functions
# ---------------------------------------------------------------------------


class TestFuncs:
    def test_string_eq(self) -> None:
        assert funcs.string_eq("pod")("pod")
        assert not funcs.string_eq("pod")("Pod")
        assert not funcs.string_eq("1")(1)

    def test_float_eq_tolerates_rounding(self) -> None:
        assert funcs.float_eq(0.3)(0.1 + 0.2)
        assert funcs.float_eq(2.0)(2)
        assert not funcs.float_eq(1.0)(1.5)

    def test_float_eq_rejects_non_numbers(self) -> None:
        assert not funcs.float_eq(1.0)("1.0")
        assert not funcs.float_eq(1.0)(True)

    def test_uid_eq_accepts_uid_and_str(self) -> None:
        match = funcs.uid_eq(UID("abc"))
        assert match(UID("abc"))
        assert match("abc")
        assert not match(UID("abd"))
        assert not match(42)

    def test_has_attrs_is_subset(self) -> None:
        match = funcs.has_attrs({"app": "web"})
        assert match({"app": "web", "tier": "frontend"})
        assert not match({"app": "db"})
        assert not match({"tier": "frontend"})
        assert not match(["app"])

    def test_empty_attrs_match_any_mapping(self) -> None:
        assert funcs.has_attrs({})({})
        assert funcs.has_attrs({})({"a": "b"})

    def test_has_metadata_compares_nested_values(self) -> None:
        match = funcs.has_metadata({"labels": {"app": "web"}})
        assert match({"labels": {"app": "web"}, "created_at": "now"})
        assert not match({"labels": {"app": "web", "x": "y"}})

    def test_is_any(self) -> None:
        assert funcs.is_any(None)
        assert funcs.is_any(object())


# ---------------------------------------------------------------------------
# Query builder
# ---------------------------------------------------------------------------


class TestQuery:
    def test_new_query_matches_everything(self) -> None:
        q = Query()
        for field in FIELDS:
            assert q.is_any(field)
            assert q.match(field, object())

    def test_setters_chain(self) -> None:
        q = Query()
        assert q.namespace("default").kind("Pod") is q
        assert q.value("namespace") == "default"
        assert q.value("kind") == "Pod"

    def test_composite_match_is_and(self) -> None:
        q = Query().namespace("default").name("web")
        assert q.match("namespace", "default") and q.match("name", "web")
        assert not q.match("name", "db")

    def test_custom_functions_replace_default(self) -> None:
        q = Query().name("web", lambda c: c.startswith("web-"))
        assert q.match("name", "web-0")
        assert not q.match("name", "web")

    def test_all_functions_must_accept(self) -> None:
        q = Query().name("web", lambda c: c.startswith("w"), lambda c: c.endswith("0"))
        assert q.match("name", "web-0")
        assert not q.match("name", "web-1")

    def test_uid_accepts_plain_string(self) -> None:
        q = Query().uid("abc")
        assert q.value("uid") == UID("abc")
        assert q.match("uid", UID("abc"))

    def test_match_any_resets_field(self) -> None:
        q = Query().kind("Pod").kind(MATCH_ANY)
        assert q.is_any("kind")
        assert q.match("kind", "Node")

    def test_copy_is_independent(self) -> None:
        q = Query().namespace("default")
        refined = q.copy().kind("Pod")
        assert q.is_any("kind")
        assert refined.value("namespace") == "default"

    def test_reset_returns_match_all(self) -> None:
        q = Query().namespace("default").reset()
        assert q.is_any("namespace")

    def test_weight_uses_float_eq(self) -> None:
        assert Query().weight(1).match("weight", 1.0)

    def test_entity_is_stored_unvalidated(self) -> None:
        assert Query().entity(Entity.NODE).match("entity", "node")
        assert Query().entity("vertex").value("entity") == "vertex"

    def test_repr_lists_constrained_fields(self) -> None:
        assert repr(Query().kind("Pod")) == "Query(kind='Pod')"


# ---------------------------------------------------------------------------
# Invalid values
# ---------------------------------------------------------------------------


class TestInvalidValues:
    @pytest.mark.parametrize(
        ("setter", "value"),
        [
            ("namespace", 5),
            ("kind", None),
            ("name", b"web"),
            ("group", 1.0),
            ("version", ["v1"]),
            ("uid", 7),
            ("weight", "1.0"),
            ("weight", True),
            ("attrs", "app=web"),
            ("metadata", [("a", 1)]),
        ],
    )
    def test_wrong_type_raises(self, setter: str, value: object) -> None:
        with pytest.raises(InvalidQueryError) as exc_info:
            getattr(Query(), setter)(value)
        assert exc_info.value.field == setter

    def test_invalid_query_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Query().kind(3)
