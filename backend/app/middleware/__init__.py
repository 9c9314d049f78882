# Middleware package init
"""
Blog Backend — Middleware Package
===================================

Middleware Chain:
    Request → [Request context: ID + access log] → [CORS] → Route Handler
"""
