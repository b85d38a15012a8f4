# cleanweb/adapters/web/errors.py
"""
Exceptions raised by the web host (pipeline, components, circuits).

Domain errors live in ``cleanweb.core.domain.exceptions``; everything here
concerns the UI layer and its startup.
"""

from __future__ import annotations


class WebHostError(Exception):
    """Base class for web host errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PipelineConfigurationError(WebHostError):
    """A middleware stage could not be built. Fatal at startup."""

    def __init__(self, stage: str, reason: str):
        self.stage = stage
        super().__init__(f"Pipeline stage '{stage}' could not be configured: {reason}")


class ComponentRegistrationError(WebHostError):
    """Invalid or conflicting component route."""


class ComponentRenderError(WebHostError):
    """A component cannot be rendered with the requested mode."""


class UnknownEventError(WebHostError):
    """A circuit event names a handler the component does not declare."""

    def __init__(self, component: str, event: str):
        self.event = event
        super().__init__(f"Component '{component}' has no handler for event '{event}'")


class CircuitError(WebHostError):
    """Terminates a circuit; ``close_code`` is sent to the client."""

    def __init__(self, message: str, close_code: int = 1011):
        self.close_code = close_code
        super().__init__(message)


class AntiforgeryValidationError(WebHostError):
    """The antiforgery request token is missing, invalid or expired."""
