# cleanweb/shared/container.py
from dependency_injector import containers, providers

from cleanweb.adapters.persistence.memory_product_repo import InMemoryProductRepository
from cleanweb.adapters.web.components.circuit import CircuitRegistry
from cleanweb.core.use_cases.product_service import ProductService
from cleanweb.shared.config import settings as default_settings


class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.

    This declarative container defines the assembly instructions for the application.
    """

    # 1. Configuration
    # Wrapped in a provider so tests (and create_app) can override it.
    settings = providers.Object(default_settings)

    # 2. Gateways (Infrastructure Adapters)

    # Persistence (Singleton: one store per application)
    product_repository = providers.Singleton(
        InMemoryProductRepository,
        initial=settings.provided.SEED_PRODUCTS,
    )

    # Interactive sessions (Singleton: one registry per application)
    circuit_registry = providers.Singleton(
        CircuitRegistry,
        max_active=settings.provided.CIRCUIT_MAX_ACTIVE,
    )

    # 3. Use Cases (Application Logic)

    # Factory: new instance for every component or request,
    # with the Singleton repository injected.
    product_service = providers.Factory(
        ProductService,
        repository=product_repository,
    )
