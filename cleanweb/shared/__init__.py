# cleanweb/shared/__init__.py
"""
Shared kernel.

Cross-cutting concerns used by both the core and the adapters:
- Configuration management
- Structured logging
- Distributed tracing
- Dependency Injection wiring
"""
