"""
OM Spiritual Backend - Middleware Package
==========================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every log line written
    by the handler share the same id.
"""
