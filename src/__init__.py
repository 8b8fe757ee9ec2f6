"""
LLM Connector - Request assembly backend for the LLM Connector form
====================================================================

Turns what a user edits in the connector form into an OpenAI Responses API
request body, and proxies the OpenAI calls the form needs so the API key
stays on the server.

Key Features:
    - **Schema Inference**: JSON schema from an example output document
    - **Request Assembly**: Deterministic body construction with file search,
      web search, function and MCP tools plus strict structured output
    - **Config Import/Export**: Connector configurations as shareable JSON
    - **OpenAI Proxy**: File upload, vector stores, model listing, moderation
    - **Structured Logging**: JSON logs with rotation and request correlation

Modules:
    core: Schema inference, request assembly, import/export, configuration
    models: Pydantic models for the connector config and API schemas
    utils: Logging, JSON helpers, HTTP/OpenAI client factories
    api: FastAPI application, routes, middleware and the OpenAI proxy service

Example:
    Assembling a request body::

        from core.payload_builder import build_request_body
        from models.connector import ConnectorConfig

        config = ConnectorConfig(userPrompt="Summarize the attached report", selectedModel="gpt-4.1")
        body = build_request_body(config)
"""
