"""Tests for openapi_to_skills.parser.resources."""

from __future__ import annotations

import re
from typing import Any

import pytest

from openapi_to_skills.models import GroupBy, ParserFilter, SchemaKind
from openapi_to_skills.parser.resources import (
    build_operation,
    build_parameters,
    build_request_body,
    build_responses,
    extract_resources,
    flatten_security,
    get_resource_names,
    is_path_excluded,
    is_tag_included,
    merge_parameters,
    preferred_media_type,
    resource_from_path,
)


def op(operation_id: str, tags: list[str] | None = None, **extra: Any) -> dict[str, Any]:
    operation: dict[str, Any] = {
        "operationId": operation_id,
        "responses": {"200": {"description": "OK"}},
    }
    if tags is not None:
        operation["tags"] = tags
    operation.update(extra)
    return operation


def make_spec(paths: dict[str, Any], **extra: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1.0"},
        "paths": paths,
    }
    spec.update(extra)
    return spec


def summary(resources) -> list[tuple[str, list[str]]]:
    return [(r.tag, [o.operation_id for o in r.operations]) for r in resources]


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


class TestResourceFromPath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/users", "users"),
            ("/users/{id}", "users"),
            ("/v1/accounts/{id}", "accounts"),
            ("/api/v2/users", "users"),
            ("/API/V3/orders", "orders"),
            ("/api/items", "items"),
            ("/{tenantId}/resources", "default"),
            ("/", "default"),
            ("/v1", "v1"),
            ("/api/v1/", "default"),
            ("/v1/v2/users", "v2"),
        ],
    )
    def test_first_meaningful_segment(self, path: str, expected: str) -> None:
        assert resource_from_path(path) == expected


class TestGetResourceNames:
    def test_auto_uses_tags(self) -> None:
        assert get_resource_names("/x", {"tags": ["a", "b"]}) == ["a", "b"]

    def test_auto_falls_back_to_path(self) -> None:
        assert get_resource_names("/v1/health", {}) == ["health"]
        assert get_resource_names("/v1/health", {"tags": []}, GroupBy.AUTO) == ["health"]

    def test_tags_mode_defaults(self) -> None:
        assert get_resource_names("/v1/health", {}, GroupBy.TAGS) == ["default"]

    def test_path_mode_ignores_tags(self) -> None:
        assert get_resource_names("/users/{id}", {"tags": ["people"]}, GroupBy.PATH) == ["users"]


class TestExtractResources:
    """Grouping, filtering and ordering of resources."""

    def test_petstore_auto(self, petstore_raw) -> None:
        resources = extract_resources(petstore_raw)
        assert summary(resources) == [
            ("pets", ["listPets", "createPet", "showPetById", "deletePet"]),
            ("store", ["getInventory"]),
            ("health", ["get--v1-health"]),
        ]

    def test_tag_descriptions(self, petstore_raw) -> None:
        resources = {r.tag: r for r in extract_resources(petstore_raw)}
        assert resources["pets"].description == "Everything about your pets"
        assert resources["health"].description is None

    def test_sorted_by_operation_count(self) -> None:
        spec = make_spec(
            {
                "/one": {"get": op("one", ["a"])},
                "/two": {"get": op("two1", ["b"]), "post": op("two2", ["b"])},
                "/three": {
                    "get": op("c1", ["c"]),
                    "put": op("c2", ["c"]),
                    "delete": op("c3", ["c"]),
                },
            }
        )
        assert [r.tag for r in extract_resources(spec)] == ["c", "b", "a"]

    def test_ties_keep_creation_order(self) -> None:
        spec = make_spec({"/z": {"get": op("z", ["zeta"])}, "/a": {"get": op("a", ["alpha"])}})
        assert [r.tag for r in extract_resources(spec)] == ["zeta", "alpha"]

    def test_multi_tag_operation_is_copied(self) -> None:
        spec = make_spec({"/x": {"get": op("shared", ["a", "b"])}})
        resources = extract_resources(spec)
        assert summary(resources) == [("a", ["shared"]), ("b", ["shared"])]
        assert [r.operations[0].tag for r in resources] == ["a", "b"]

    def test_tags_mode(self) -> None:
        spec = make_spec({"/x": {"get": op("tagged", ["t"])}, "/y": {"get": op("untagged")}})
        assert summary(extract_resources(spec, group_by=GroupBy.TAGS)) == [
            ("t", ["tagged"]),
            ("default", ["untagged"]),
        ]

    def test_path_mode(self, petstore_raw) -> None:
        resources = extract_resources(petstore_raw, group_by=GroupBy.PATH)
        assert [r.tag for r in resources] == ["pets", "store", "health"]

    def test_method_order(self) -> None:
        spec = make_spec(
            {"/x": {"patch": op("p"), "delete": op("d"), "get": op("g"), "post": op("po")}}
        )
        assert summary(extract_resources(spec))[0][1] == ["g", "po", "d", "p"]

    def test_non_method_keys_ignored(self) -> None:
        spec = make_spec({"/x": {"summary": "s", "servers": [], "get": op("g")}})
        assert summary(extract_resources(spec)) == [("x", ["g"])]

    def test_empty_paths(self) -> None:
        assert extract_resources(make_spec({})) == []

    def test_deterministic(self, petstore_raw) -> None:
        assert extract_resources(petstore_raw) == extract_resources(petstore_raw)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    def test_include_tags(self, petstore_raw) -> None:
        resources = extract_resources(petstore_raw, ParserFilter(include_tags=["store"]))
        assert [r.tag for r in resources] == ["store"]

    def test_include_wins_over_exclude(self, petstore_raw) -> None:
        path_filter = ParserFilter(include_tags=["store"], exclude_tags=["store"])
        assert [r.tag for r in extract_resources(petstore_raw, path_filter)] == ["store"]

    def test_exclude_tags(self, petstore_raw) -> None:
        resources = extract_resources(petstore_raw, ParserFilter(exclude_tags=["pets"]))
        assert [r.tag for r in resources] == ["store", "health"]

    def test_tag_filter_applies_to_path_keys(self, petstore_raw) -> None:
        resources = extract_resources(petstore_raw, ParserFilter(exclude_tags=["health"]))
        assert "health" not in [r.tag for r in resources]

    def test_multi_tag_filtered_per_key(self) -> None:
        spec = make_spec({"/x": {"get": op("shared", ["a", "b"])}})
        resources = extract_resources(spec, ParserFilter(exclude_tags=["a"]))
        assert summary(resources) == [("b", ["shared"])]

    def test_exclude_deprecated(self, petstore_raw) -> None:
        resources = extract_resources(petstore_raw, ParserFilter(exclude_deprecated=True))
        pets = resources[0]
        assert "deletePet" not in [o.operation_id for o in pets.operations]
        assert len(pets.operations) == 3

    def test_deprecated_kept_by_default(self, petstore_raw) -> None:
        pets = extract_resources(petstore_raw)[0]
        delete = [o for o in pets.operations if o.operation_id == "deletePet"][0]
        assert delete.deprecated is True

    def test_exclude_path_prefix(self) -> None:
        spec = make_spec(
            {
                "/internal": {"get": op("a")},
                "/internal-other": {"get": op("b")},
                "/internal/x": {"get": op("c")},
                "/public": {"get": op("d")},
            }
        )
        resources = extract_resources(spec, ParserFilter(exclude_paths=["/internal"]))
        assert summary(resources) == [("public", ["d"])]

    def test_exclude_path_regex(self) -> None:
        spec = make_spec({"/admin/users": {"get": op("a")}, "/users": {"get": op("b")}})
        resources = extract_resources(
            spec, ParserFilter(exclude_paths=[re.compile(r"^/admin/")])
        )
        assert summary(resources) == [("users", ["b"])]

    def test_is_path_excluded(self) -> None:
        assert is_path_excluded("/internal-other", ["/internal"])
        assert is_path_excluded("/v1/admin", [re.compile("admin")])
        assert not is_path_excluded("/public", ["/internal", re.compile("^/admin")])
        assert not is_path_excluded("/public", [])

    def test_is_tag_included(self) -> None:
        assert is_tag_included("x", ParserFilter())
        assert not is_tag_included("x", ParserFilter(include_tags=["y"]))
        assert is_tag_included("x", ParserFilter(include_tags=["x"], exclude_tags=["x"]))
        assert not is_tag_included("x", ParserFilter(exclude_tags=["x"]))


# ---------------------------------------------------------------------------
# Operation mapping
# ---------------------------------------------------------------------------


class TestBuildOperation:
    def test_fallback_operation_id(self) -> None:
        operation = build_operation("/v1/health", "get", {}, "health")
        assert operation.operation_id == "get--v1-health"
        assert operation.method == "GET"

    def test_fields(self, petstore_raw) -> None:
        raw = petstore_raw["paths"]["/pets"]["get"]
        operation = build_operation("/pets", "get", raw, "pets")
        assert operation.summary == "List all pets"
        assert operation.description is None
        assert operation.deprecated is False
        (limit,) = operation.parameters
        assert limit.name == "limit"
        assert limit.location == "query"
        assert limit.type == "integer (int32)"
        assert limit.required is False
        assert [r.status for r in operation.responses] == ["200", "default"]
        assert operation.responses[0].schema_.ref == "Pets"

    def test_path_level_parameters_merged(self, petstore_doc) -> None:
        pets = petstore_doc.resources[0]
        show = [o for o in pets.operations if o.operation_id == "showPetById"][0]
        (pet_id,) = show.parameters
        assert pet_id.name == "petId"
        assert pet_id.location == "path"
        assert pet_id.required is True

    def test_operation_parameter_overrides_path_level(self) -> None:
        path_params = [{"name": "id", "in": "path", "required": True, "description": "path"}]
        op_params = [
            {"name": "id", "in": "path", "required": True, "description": "operation"},
            {"name": "id", "in": "query"},
        ]
        merged = merge_parameters(path_params, op_params)
        assert [p.get("description") for p in merged] == ["operation", None]

    def test_reference_parameters_dropped(self) -> None:
        raw = {"parameters": [{"$ref": "#/components/parameters/limit"}, {"name": "q", "in": "query"}]}
        operation = build_operation("/x", "get", raw, "x")
        assert [p.name for p in operation.parameters] == ["q"]
        assert operation.parameters[0].type == "any"
        assert operation.parameters[0].schema_ is None

    def test_global_security_applies(self, petstore_doc) -> None:
        list_pets = petstore_doc.resources[0].operations[0]
        assert [(s.name, s.scopes) for s in list_pets.security] == [("api_key", [])]

    def test_empty_security_overrides_global(self, petstore_doc) -> None:
        create = petstore_doc.resources[0].operations[1]
        assert create.operation_id == "createPet"
        assert create.security == []

    def test_operation_security_overrides_global(self, petstore_doc) -> None:
        inventory = petstore_doc.resources[1].operations[0]
        assert [(s.name, s.scopes) for s in inventory.security] == [
            ("petstore_auth", ["read:pets"])
        ]


class TestRequestBodyAndResponses:
    def test_prefers_json(self, petstore_raw) -> None:
        body = build_request_body(petstore_raw["paths"]["/pets"]["post"]["requestBody"])
        assert body.required is True
        assert body.description == "Pet to add to the store"
        assert body.content_types == ["application/xml", "application/json"]
        assert body.schema_.ref == "NewPet"

    def test_first_media_type_without_json(self) -> None:
        body = build_request_body(
            {"content": {"text/plain": {"schema": {"type": "string"}}, "text/csv": {}}}
        )
        assert body.schema_.inline.name == "(inline)"
        assert body.required is False

    def test_reference_body(self) -> None:
        assert build_request_body({"$ref": "#/components/requestBodies/Pet"}) is None

    def test_body_without_content(self) -> None:
        body = build_request_body({"description": "nothing"})
        assert body.content_types == []
        assert body.schema_ is None

    def test_responses(self) -> None:
        responses = build_responses(
            {
                "200": {"description": "OK", "content": {"application/json": {"schema": {"type": "object"}}}},
                "404": {"$ref": "#/components/responses/NotFound"},
                "500": {},
            }
        )
        assert [(r.status, r.description) for r in responses] == [
            ("200", "OK"),
            ("404", "(reference)"),
            ("500", ""),
        ]
        assert responses[0].schema_.inline is not None
        assert responses[1].schema_ is None

    def test_inline_response_schema(self, petstore_doc) -> None:
        inventory = petstore_doc.resources[1].operations[0]
        inline = inventory.responses[0].schema_.inline
        assert [f.name for f in inline.fields] == ["available", "sold"]

    def test_empty_schemas_are_kept(self) -> None:
        (param,) = build_parameters([{"name": "q", "in": "query", "schema": {}}])
        assert param.type == "any"
        assert param.schema_.inline.type == SchemaKind.PRIMITIVE

        body = build_request_body({"content": {"application/json": {"schema": {}}}})
        assert body.schema_.inline is not None

        (ok,) = build_responses(
            {"200": {"description": "OK", "content": {"application/json": {"schema": {}}}}}
        )
        assert ok.schema_.inline is not None

    def test_preferred_media_type(self) -> None:
        assert preferred_media_type({}) is None
        assert preferred_media_type({"a/b": {"x": 1}}) == {"x": 1}
        assert preferred_media_type({"a/b": {"x": 1}, "application/json": {"y": 2}}) == {"y": 2}


class TestFlattenSecurity:
    def test_flattens_in_order(self) -> None:
        flat = flatten_security([{"a": ["s1"], "b": []}, {"a": ["s2"]}])
        assert [(s.name, s.scopes) for s in flat] == [
            ("a", ["s1"]),
            ("b", []),
            ("a", ["s2"]),
        ]

    def test_empty(self) -> None:
        assert flatten_security([]) == []
