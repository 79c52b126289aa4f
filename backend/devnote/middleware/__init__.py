# Middleware package init
"""
DevNote Backend - Middleware Package
====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route

The request ID is assigned first so every access line and every response,
including a rate-limited 429, carries it. Rejected writes are still logged.
"""
