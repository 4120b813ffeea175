# Middleware package init
"""
Student Records — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: sets the correlation ID used by every later log line
    2. Logging: one access-log line per request, with status and duration
"""
