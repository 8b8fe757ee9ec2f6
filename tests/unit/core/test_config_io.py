"""Tests for connector config import/export."""

from __future__ import annotations

import json

from typing import Any

import pytest

from core.config_io import export_config, import_config
from core.exceptions import ConnectorValidationError, InvalidJsonError
from core.payload_builder import build_responses_body
from models.connector import ConnectorConfig, FunctionTool, McpTool


class TestExportConfig:
    """Tests for export_config."""

    def test_uses_camel_case_keys(self, full_config_data: dict[str, Any]) -> None:
        document = export_config(ConnectorConfig.model_validate(full_config_data))

        assert document["stepName"] == "Research step"
        assert document["selectedModel"] == "gpt-4o"
        assert document["selectedVectorStoreIds"] == ["vs_1", "vs_2"]
        assert "step_name" not in document

    def test_tool_parameters_exported_as_json(self, full_config_data: dict[str, Any]) -> None:
        document = export_config(ConnectorConfig.model_validate(full_config_data))

        function = document["tools"][0]
        assert function["toolType"] == "function"
        assert function["parameters"] == {"type": "object", "properties": {"q": {"type": "string"}}}

    def test_mcp_tool_exported_verbatim(self, full_config_data: dict[str, Any]) -> None:
        document = export_config(ConnectorConfig.model_validate(full_config_data))

        assert document["tools"][1] == {
            "toolType": "mcp",
            "server_label": "docs",
            "server_url": "https://mcp.example.com",
            "auth_token": "tok_123",
        }

    def test_schema_exported_as_json(self, full_config_data: dict[str, Any]) -> None:
        document = export_config(ConnectorConfig.model_validate(full_config_data))
        assert document["jsonSchema"] == {"type": "object", "properties": {"title": {"type": "string"}}}

    def test_unparsable_text_exported_as_text(self, minimal_config_data: dict[str, Any]) -> None:
        config = ConnectorConfig.model_validate({**minimal_config_data, "outputExample": "{draft"})
        document = export_config(config)

        assert document["outputExample"] == "{draft"
        assert document["jsonSchema"] == ""

    def test_invalid_tool_parameters_fail(self, minimal_config_data: dict[str, Any]) -> None:
        config = ConnectorConfig.model_validate(
            {**minimal_config_data, "tools": [{"toolType": "function", "name": "bad", "parameters": "{"}]}
        )

        with pytest.raises(ConnectorValidationError, match="Cannot export tool 'bad'"):
            export_config(config)

    def test_document_is_json_serializable(self, full_config_data: dict[str, Any]) -> None:
        document = export_config(ConnectorConfig.model_validate(full_config_data))
        assert json.loads(json.dumps(document)) == document


class TestImportConfig:
    """Tests for import_config."""

    def test_export_then_import_builds_same_body(self, full_config_data: dict[str, Any]) -> None:
        original = ConnectorConfig.model_validate(full_config_data)
        restored = import_config(json.dumps(export_config(original)))

        assert build_responses_body(restored) == build_responses_body(original)

    def test_json_values_become_text(self) -> None:
        config = import_config(
            {
                "userPrompt": "hi",
                "tools": [{"toolType": "function", "name": "f", "parameters": {"type": "object"}}],
                "jsonSchema": {"type": "object"},
            }
        )

        tool = config.tools[0]
        assert isinstance(tool, FunctionTool)
        assert tool.parameters == '{\n  "type": "object"\n}'
        assert config.json_schema == '{\n  "type": "object"\n}'

    def test_missing_sections_use_defaults(self) -> None:
        config = import_config({"stepName": "Only a name"})

        assert config.step_name == "Only a name"
        assert config.provider == "OpenAI"
        assert config.selected_model == "gpt-4.1"
        assert config.tools == []

    def test_null_values_use_defaults(self) -> None:
        config = import_config({"temperature": None, "webSearchParams": None, "selectedVectorStoreIds": None})

        assert config.temperature == 0.1
        assert config.web_search_params.country == "US"
        assert config.selected_vector_store_ids == []

    def test_legacy_empty_vector_store_object(self) -> None:
        assert import_config({"selectedVectorStoreIds": {}}).selected_vector_store_ids == []

    def test_mcp_tool_restored(self) -> None:
        config = import_config(
            {"tools": [{"toolType": "mcp", "server_label": "a", "server_url": "https://a", "auth_token": "t"}]}
        )
        assert isinstance(config.tools[0], McpTool)
        assert config.tools[0].is_complete

    def test_invalid_json_text(self) -> None:
        with pytest.raises(InvalidJsonError) as exc_info:
            import_config("{not json")

        assert exc_info.value.field == "config"

    @pytest.mark.parametrize("document", ["[1, 2]", '"text"', "3"])
    def test_non_object_document(self, document: str) -> None:
        with pytest.raises(ConnectorValidationError, match="must be a JSON object"):
            import_config(document)

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(ConnectorValidationError) as exc_info:
            import_config({"provider": "Mistral"})

        assert exc_info.value.field == "provider"
        assert "Invalid connector configuration at 'provider'" in exc_info.value.message

    def test_unknown_tool_type_rejected(self) -> None:
        with pytest.raises(ConnectorValidationError):
            import_config({"tools": [{"toolType": "retrieval"}]})
