"""
Core Layer - Connector Logic and Configuration
==============================================

Synchronous logic behind the connector form. Nothing here talks to a provider.

Modules:
    schema_inference: Infer a JSON schema from an example and close it with
        ``additionalProperties: false``
    payload_builder: Assemble provider request bodies from a connector config
    config_io: Export/import connector configurations as JSON documents
    exceptions: Domain errors (invalid JSON, missing fields, bad tools)
    constants: Provider catalog, evaluation tables, defaults and Pydantic settings

See Also:
    :mod:`models.connector`: The connector configuration model
    :mod:`api.routes.v1.connector`: HTTP endpoints exposing this layer
"""
