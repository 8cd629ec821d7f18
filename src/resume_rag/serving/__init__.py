"""
Serving — FastAPI application for upload and retrieval-augmented chat.

This module is a thin transport layer: every route delegates to the
ingestion coordinator or chat orchestrator and maps pipeline errors onto
HTTP status codes.
"""
