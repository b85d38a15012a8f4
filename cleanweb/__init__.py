# cleanweb/__init__.py
"""
cleanweb - Clean Architecture web host.

Layered as Domain (core.domain), Application (core.ports, core.use_cases),
Infrastructure (adapters.persistence), UI (adapters.web) and the
SharedKernel (shared).
"""

__version__ = "1.0.0"
