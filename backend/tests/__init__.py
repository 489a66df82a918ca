"""
metaserver - Test Suite

Structure:
- unit/: services, backend clients, settings and templates
- integration/: HTTP surfaces through the full ASGI stack
- helpers/: in-memory backends shared by both
"""
