"""
Utils Module - Infrastructure Utilities
=======================================

Modules:
    logger: Structured JSON logging with rotation, redaction and request
        context enrichment
    json_utils: JSON serialization partials and the parse/format/validate
        helpers behind the form's JSON editors
    http_logger: httpx event hooks logging OpenAI traffic with masked credentials
    client_factory: AsyncOpenAI and httpx client construction

Example:
    Logging with request context::

        from utils.logger import logger

        logger.info("Request body assembled", provider="OpenAI")
"""
