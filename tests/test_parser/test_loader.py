"""Tests for openapi_to_skills.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from openapi_to_skills.exceptions import SpecParseError
from openapi_to_skills.parser.loader import load_spec, parse_document, validate_spec

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

PETS_YAML = textwrap.dedent("""\
    openapi: "3.0.3"
    info:
      title: Pets From YAML
      version: "1.0.0"
    paths:
      /pets:
        get:
          operationId: listPets
""")


def _response(url: str, status: int = 200, **kwargs) -> httpx.Response:
    return httpx.Response(status_code=status, request=httpx.Request("GET", url), **kwargs)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestLoadFile:
    def test_json_fixture(self) -> None:
        spec = load_spec(str(FIXTURES_DIR / "petstore.json"))
        assert spec["info"]["title"] == "Swagger Petstore"
        assert "/pets/{petId}" in spec["paths"]

    @pytest.mark.parametrize("suffix", [".yaml", ".yml", ".txt", ""])
    def test_yaml_with_any_suffix(self, tmp_path: Path, suffix: str) -> None:
        path = tmp_path / f"pets{suffix}"
        path.write_text(PETS_YAML, encoding="utf-8")
        spec = load_spec(str(path))
        assert spec["paths"]["/pets"]["get"]["operationId"] == "listPets"

    def test_json_suffix_does_not_fall_back_to_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "pets.json"
        path.write_text(PETS_YAML, encoding="utf-8")
        with pytest.raises(SpecParseError, match=r"Invalid JSON in .*pets\.json"):
            load_spec(str(path))

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="Spec file not found"):
            load_spec(str(tmp_path / "nope.yaml"))

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError, match="Spec file not found"):
            load_spec(str(tmp_path))

    def test_blank(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.yaml"
        path.write_text("  \n\n", encoding="utf-8")
        with pytest.raises(SpecParseError, match="Spec file is empty"):
            load_spec(str(path))

    def test_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"title: caf\xe9\n")
        with pytest.raises(SpecParseError, match="Failed to read spec file"):
            load_spec(str(path))

    def test_top_level_list(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text(json.dumps(["openapi"]), encoding="utf-8")
        with pytest.raises(SpecParseError, match="must contain a JSON/YAML object, got list"):
            load_spec(str(path))


# ---------------------------------------------------------------------------
# stdin
# ---------------------------------------------------------------------------


class TestLoadStdin:
    @pytest.fixture
    def pipe(self, monkeypatch: pytest.MonkeyPatch):
        def _pipe(text: str) -> None:
            monkeypatch.setattr("sys.stdin", io.StringIO(text))

        return _pipe

    def test_json(self, pipe) -> None:
        pipe(json.dumps({"openapi": "3.0.0", "info": {"title": "Piped"}}))
        assert load_spec("-")["info"]["title"] == "Piped"

    def test_yaml(self, pipe) -> None:
        pipe(PETS_YAML)
        assert load_spec("-")["info"]["title"] == "Pets From YAML"

    @pytest.mark.parametrize("text", ["", " \n\t"])
    def test_nothing_piped(self, pipe, text: str) -> None:
        pipe(text)
        with pytest.raises(SpecParseError, match="No input received from stdin"):
            load_spec("-")


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------


class TestLoadUrl:
    URL = "https://api.example.com/openapi"

    def test_json_body(self) -> None:
        response = _response(self.URL, json={"openapi": "3.0.1", "info": {"title": "Remote"}})
        with patch("openapi_to_skills.parser.loader.httpx.get", return_value=response) as get:
            assert load_spec(self.URL)["info"]["title"] == "Remote"
        get.assert_called_once_with(self.URL, timeout=30.0, follow_redirects=True)

    @pytest.mark.parametrize(
        "content_type", ["application/x-yaml", "text/yaml; charset=utf-8", "text/plain"]
    )
    def test_yaml_body(self, content_type: str) -> None:
        response = _response(self.URL, text=PETS_YAML, headers={"content-type": content_type})
        with patch("openapi_to_skills.parser.loader.httpx.get", return_value=response):
            assert load_spec(self.URL)["info"]["title"] == "Pets From YAML"

    def test_json_content_type_with_yaml_body(self) -> None:
        response = _response(
            self.URL, text=PETS_YAML, headers={"content-type": "application/json"}
        )
        with patch("openapi_to_skills.parser.loader.httpx.get", return_value=response):
            with pytest.raises(SpecParseError, match="Invalid JSON in https://"):
                load_spec(self.URL)

    @pytest.mark.parametrize("status", [404, 500])
    def test_http_status(self, status: int) -> None:
        with patch(
            "openapi_to_skills.parser.loader.httpx.get",
            return_value=_response(self.URL, status=status),
        ):
            with pytest.raises(SpecParseError, match=f"HTTP {status} fetching spec"):
                load_spec(self.URL)

    def test_unreachable(self) -> None:
        with patch(
            "openapi_to_skills.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(SpecParseError, match="Failed to fetch spec from .*refused"):
                load_spec(self.URL)

    def test_http_scheme_is_a_url(self) -> None:
        response = _response("http://localhost:8000/openapi.json", json={"openapi": "3.0.0"})
        with patch("openapi_to_skills.parser.loader.httpx.get", return_value=response) as get:
            load_spec("http://localhost:8000/openapi.json")
        get.assert_called_once()


# ---------------------------------------------------------------------------
# parse_document
# ---------------------------------------------------------------------------


class TestParseDocument:
    def test_no_hint_json(self) -> None:
        assert parse_document('{"paths": {}}') == {"paths": {}}

    def test_no_hint_yaml(self) -> None:
        assert parse_document("paths: {}\ntags: [a, b]\n") == {"paths": {}, "tags": ["a", "b"]}

    def test_yaml_hint_reads_json(self) -> None:
        assert parse_document('{"a": [1, 2]}', hint="yaml") == {"a": [1, 2]}

    def test_yaml_1_1_boolean_words_stay_strings(self) -> None:
        text = "on: 1\noff: 2\nyes: [no, y, n]\ntrue: [True, FALSE]\n"
        assert parse_document(text, hint="yaml") == {
            "on": 1,
            "off": 2,
            "yes": ["no", "y", "n"],
            True: [True, False],
        }

    def test_both_decoders_fail(self) -> None:
        with pytest.raises(SpecParseError) as exc_info:
            parse_document("paths: [unclosed", origin="api.txt")
        message = str(exc_info.value)
        assert message.startswith("Failed to parse api.txt as JSON or YAML")
        assert "JSON error:" in message
        assert "YAML error:" in message

    def test_yaml_hint_reports_only_yaml(self) -> None:
        with pytest.raises(SpecParseError) as exc_info:
            parse_document("paths: [unclosed", hint="yaml")
        assert "JSON error" not in str(exc_info.value)

    @pytest.mark.parametrize(
        ("text", "kind"),
        [("plain words", "str"), ("42", "int"), ("~", "an empty document")],
    )
    def test_scalar_top_level(self, text: str, kind: str) -> None:
        with pytest.raises(SpecParseError, match=f"got {kind}$"):
            parse_document(text)


# ---------------------------------------------------------------------------
# validate_spec
# ---------------------------------------------------------------------------


def _doc(**overrides):
    doc = {"openapi": "3.0.3", "info": {"title": "T", "version": "1"}, "paths": {}}
    doc.update(overrides)
    return doc


class TestValidateSpec:
    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3"])
    def test_3_0_passes_quietly(self, version: str) -> None:
        with patch("openapi_to_skills.parser.loader.logger") as mock_logger:
            assert validate_spec(_doc(openapi=version)) == version
        mock_logger.warning.assert_not_called()

    def test_3_1_passes_with_warning(self) -> None:
        with patch("openapi_to_skills.parser.loader.logger") as mock_logger:
            assert validate_spec(_doc(openapi="3.1.0")) == "3.1.0"
        mock_logger.warning.assert_called_once()

    def test_numeric_version_is_stringified(self) -> None:
        with patch("openapi_to_skills.parser.loader.logger"):
            assert validate_spec(_doc(openapi=3.1)) == "3.1"

    def test_swagger(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0 is not supported.*converter"):
            validate_spec({"swagger": "2.0", "info": {"title": "Old"}, "paths": {}})

    def test_missing_openapi(self) -> None:
        doc = _doc()
        del doc["openapi"]
        with pytest.raises(SpecParseError, match='missing "openapi" field'):
            validate_spec(doc)

    def test_version_2_without_swagger_key(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported OpenAPI version: 2.0"):
            validate_spec(_doc(openapi="2.0"))

    @pytest.mark.parametrize("info", [None, {}, {"title": ""}, "title"])
    def test_missing_title(self, info) -> None:
        with pytest.raises(SpecParseError, match='missing "info.title"'):
            validate_spec(_doc(info=info))

    @pytest.mark.parametrize("paths", [None, [], "x"])
    def test_missing_paths(self, paths) -> None:
        with pytest.raises(SpecParseError, match='missing "paths"'):
            validate_spec(_doc(paths=paths))

    def test_fixture(self, petstore_raw) -> None:
        assert validate_spec(petstore_raw) == "3.0.3"
