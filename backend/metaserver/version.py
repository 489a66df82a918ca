"""Application version information."""

# Semantic Versioning: MAJOR.MINOR.PATCH
VERSION = "0.1.0"
