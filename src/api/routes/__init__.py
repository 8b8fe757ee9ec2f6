"""Route modules for the LLM Connector API.

All routes are versioned and live in the v1/ subdirectory.
"""
