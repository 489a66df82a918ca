"""Request-level helpers for the routers."""
