"""Server-wide constants."""

PROJECT_NAME = "Character Figure"
API_PREFIX = "/api"
VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
