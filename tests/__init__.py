# tests/__init__.py
"""
Test suite for cleanweb.

Organization:
- `core`: use cases and domain models, with the repository mocked.
- `adapters`: the request pipeline, components, circuits and the JSON API,
  driven through Starlette's TestClient.
- `shared`: configuration, logging and telemetry.
"""
