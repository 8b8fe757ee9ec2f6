"""
Models Module - Data Models and Type Definitions
=================================================

Pydantic v2 models for the connector configuration and the HTTP API.

Modules:
    connector: ConnectorConfig and its tool, web search and evaluation parts.
        camelCase aliases keep the form's JSON keys.
    error_models: Error codes and the ``{"error": {...}}`` response envelope
    schemas: Request/response models for each API area
"""
