"""
Dependency injection container using dependency-injector.
Wires the rate provider, refresh scheduler, services and controllers.
"""

from dependency_injector import containers, providers

from worklio.core.config import settings
from worklio.core.integrations.exchange_rates import FrankfurterRateProvider
from worklio.db.session import get_sessionmaker
from worklio.services.exchange_rate_refresh_service import ExchangeRateRefreshService
from worklio.services.exchange_rate_scheduler import ExchangeRateScheduler
from worklio.services.health_service import HealthService
from worklio.controllers.health_controller import HealthController


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    config = providers.Configuration()

    session_factory = providers.Callable(get_sessionmaker)

    # Exchange rates
    rate_provider = providers.Singleton(
        FrankfurterRateProvider,
        base_url=config.exchange_rate_api_url,
        timeout=config.exchange_rate_request_timeout,
    )

    exchange_rate_refresh_service = providers.Factory(
        ExchangeRateRefreshService,
        session_factory=session_factory,
        provider=rate_provider,
        supported_currencies=config.supported_currencies,
        base_currency=config.exchange_rate_base_currency,
    )

    exchange_rate_scheduler = providers.Singleton(
        ExchangeRateScheduler,
        refresh_service=exchange_rate_refresh_service,
        run_at=config.exchange_rate_refresh_time,
        cycle_timeout=config.exchange_rate_refresh_timeout,
        run_on_startup=config.exchange_rate_refresh_on_startup,
    )

    # Services
    health_service = providers.Singleton(
        HealthService,
    )

    # Controllers
    health_controller = providers.Factory(
        HealthController,
        health_service=health_service,
    )


def build_container() -> Container:
    """Create a container configured from application settings."""
    container = Container()
    container.config.from_dict({
        "exchange_rate_api_url": settings.EXCHANGE_RATE_API_URL,
        "exchange_rate_request_timeout": settings.EXCHANGE_RATE_REQUEST_TIMEOUT_SECONDS,
        "supported_currencies": list(settings.SUPPORTED_CURRENCIES),
        "exchange_rate_base_currency": settings.EXCHANGE_RATE_BASE_CURRENCY,
        "exchange_rate_refresh_time": settings.EXCHANGE_RATE_REFRESH_TIME,
        "exchange_rate_refresh_timeout": settings.EXCHANGE_RATE_REFRESH_TIMEOUT_SECONDS,
        "exchange_rate_refresh_on_startup": settings.EXCHANGE_RATE_REFRESH_ON_STARTUP,
    })
    return container


# Global container instance
_container: Container = None


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = build_container()
    return _container


def set_container(container: Container) -> None:
    global _container
    _container = container
