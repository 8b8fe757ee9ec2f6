from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies import get_openai_service
from api.middleware.exception_handlers import register_exception_handlers
from api.routes.v1.connector import router
from models.error_models import ErrorCode


@pytest.fixture
def mock_service() -> MagicMock:
    service = MagicMock()
    service.create_response = AsyncMock(
        return_value={
            "response": {"id": "resp_1", "object": "response"},
            "output_text": '{"title": "Done"}',
            "structured_output": {"title": "Done"},
        }
    )
    return service


@pytest.fixture
def app(mock_service: MagicMock) -> Generator[FastAPI, None, None]:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router, prefix="/api/v1/connector")
    app.dependency_overrides[get_openai_service] = lambda: mock_service

    with patch("api.middleware.exception_handlers.logger"):
        yield app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


class TestSchemaInference:
    """POST /connector/schema"""

    def test_infers_schema(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/schema", json={"example": '{"a": 1, "b": "x"}'})

        assert response.status_code == 200
        data = response.json()
        assert data["schema"]["required"] == ["a", "b"]
        assert data["text"].startswith('{\n  "type": "object"')

    def test_invalid_example(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/schema", json={"example": '{"a": '})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == ErrorCode.VALIDATION_INVALID_FORMAT.value
        assert error["details"][0]["field"] == "outputExample"

    def test_non_object_example(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/schema", json={"example": "[1, 2]"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == ErrorCode.VALIDATION_INVALID_FORMAT.value

    def test_deeply_nested_example(self, client: TestClient) -> None:
        example = '{"a": ' * 2000 + "{}" + "}" * 2000

        response = client.post("/api/v1/connector/schema", json={"example": example})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == ErrorCode.VALIDATION_INVALID_FORMAT.value


class TestJsonHelpers:
    """POST /connector/json/validate and /connector/json/format"""

    def test_validate_valid(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/json/validate", json={"text": "[1]"})
        assert response.json() == {"valid": True, "message": "Valid JSON"}

    def test_validate_invalid_is_not_an_error(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/json/validate", json={"text": "{"})

        assert response.status_code == 200
        assert response.json()["valid"] is False

    @pytest.mark.parametrize("text", ['{"a": NaN}', "[" * 100_000 + "]" * 100_000], ids=["nan", "deep"])
    def test_validate_rejects_non_json_input(self, client: TestClient, text: str) -> None:
        response = client.post("/api/v1/connector/json/validate", json={"text": text})

        assert response.status_code == 200
        assert response.json()["valid"] is False

    def test_format(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/json/format", json={"text": '{"a":1}'})
        assert response.json() == {"text": '{\n  "a": 1\n}'}

    def test_format_invalid(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/json/format", json={"text": "nope"})

        assert response.status_code == 422
        assert response.json()["error"]["details"][0]["field"] == "text"


class TestPayload:
    """POST /connector/payload"""

    def test_minimal_body(self, client: TestClient, minimal_config_data: dict[str, Any]) -> None:
        response = client.post("/api/v1/connector/payload", json=minimal_config_data)

        assert response.status_code == 200
        data = response.json()
        assert data["provider"] == "OpenAI"
        assert data["api"] == "Responses API"
        assert data["body"]["input"] == [{"role": "user", "content": "Summarize AI in education."}]
        assert data["body"]["tools"] == []

    def test_full_body(self, client: TestClient, full_config_data: dict[str, Any]) -> None:
        body = client.post("/api/v1/connector/payload", json=full_config_data).json()["body"]

        assert [tool["type"] for tool in body["tools"]] == ["file_search", "web_search_preview", "function", "mcp"]
        assert body["text"]["format"]["strict"] is True
        assert body["tool_choice"] == "lookup"

    def test_missing_prompt(self, client: TestClient, minimal_config_data: dict[str, Any]) -> None:
        response = client.post("/api/v1/connector/payload", json={**minimal_config_data, "userPrompt": " "})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == ErrorCode.VALIDATION_MISSING_FIELD.value
        assert error["details"][0]["field"] == "userPrompt"

    def test_bad_tool_parameters(self, client: TestClient, minimal_config_data: dict[str, Any]) -> None:
        config = {
            **minimal_config_data,
            "tools": [{"toolType": "function", "name": "lookup", "parameters": "{oops"}],
        }

        response = client.post("/api/v1/connector/payload", json=config)

        assert response.status_code == 422
        assert "lookup" in response.json()["error"]["message"]

    def test_nan_in_schema_rejected(self, client: TestClient, minimal_config_data: dict[str, Any]) -> None:
        config = {**minimal_config_data, "jsonSchema": '{"type": "object", "default": NaN}'}

        response = client.post("/api/v1/connector/payload", json=config)

        assert response.status_code == 422
        assert response.json()["error"]["details"][0]["field"] == "jsonSchema"

    def test_unsupported_provider(self, client: TestClient, minimal_config_data: dict[str, Any]) -> None:
        response = client.post("/api/v1/connector/payload", json={**minimal_config_data, "provider": "Anthropic"})

        assert response.status_code == 422
        assert response.json()["error"]["details"][0]["field"] == "provider"

    def test_unknown_provider_is_request_validation_error(
        self, client: TestClient, minimal_config_data: dict[str, Any]
    ) -> None:
        response = client.post("/api/v1/connector/payload", json={**minimal_config_data, "provider": "Mistral"})

        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Request validation failed"


class TestConfigImportExport:
    """POST /connector/config/export and /connector/config/import"""

    def test_export(self, client: TestClient, full_config_data: dict[str, Any]) -> None:
        response = client.post("/api/v1/connector/config/export", json=full_config_data)

        assert response.status_code == 200
        document = response.json()
        assert document["stepName"] == "Research step"
        assert document["tools"][0]["parameters"]["type"] == "object"

    def test_export_then_import(self, client: TestClient, full_config_data: dict[str, Any]) -> None:
        document = client.post("/api/v1/connector/config/export", json=full_config_data).json()

        response = client.post("/api/v1/connector/config/import", json=document)

        assert response.status_code == 200
        config = response.json()
        assert config["stepName"] == "Research step"
        assert config["selectedVectorStoreIds"] == ["vs_1", "vs_2"]
        assert isinstance(config["tools"][0]["parameters"], str)

    def test_import_invalid_document(self, client: TestClient) -> None:
        response = client.post("/api/v1/connector/config/import", json={"provider": "Mistral"})

        assert response.status_code == 422
        assert response.json()["error"]["details"][0]["field"] == "provider"


class TestRun:
    """POST /connector/run"""

    def test_sends_assembled_body(
        self, client: TestClient, mock_service: MagicMock, full_config_data: dict[str, Any]
    ) -> None:
        response = client.post("/api/v1/connector/run", json=full_config_data)

        assert response.status_code == 200
        data = response.json()
        sent_body = mock_service.create_response.call_args.args[0]
        assert data["body"] == sent_body
        assert sent_body["model"] == "gpt-4o"
        assert data["response"]["id"] == "resp_1"
        assert data["structured_output"] == {"title": "Done"}

    def test_validation_failure_skips_provider(
        self, client: TestClient, mock_service: MagicMock, minimal_config_data: dict[str, Any]
    ) -> None:
        response = client.post("/api/v1/connector/run", json={**minimal_config_data, "selectedModel": ""})

        assert response.status_code == 422
        mock_service.create_response.assert_not_called()

    def test_missing_api_key(self, minimal_config_data: dict[str, Any]) -> None:
        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(router, prefix="/api/v1/connector")
        app.state.openai_client = None

        with patch("api.middleware.exception_handlers.logger"):
            response = TestClient(app).post("/api/v1/connector/run", json=minimal_config_data)

        assert response.status_code == 503
        assert response.json()["error"]["code"] == ErrorCode.INTERNAL_CONFIGURATION_ERROR.value
