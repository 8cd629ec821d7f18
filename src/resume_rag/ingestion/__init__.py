"""
Ingestion — text extraction, chunking, and embedding into the vector index.

This module is responsible for the pipeline that turns an uploaded
document (PDF, DOCX, TXT, CSV) into embedded, offset-tracked chunks held
by the in-memory vector index.
"""
