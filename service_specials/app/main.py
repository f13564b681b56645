"""
Specials service wiring for the storefront render layer.
"""

from typing import Optional

from shared.config import SpecialsSettings, get_settings
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector, get_metrics_collector

from service_specials.app.adapters.dutchie_client import DutchieClient
from service_specials.app.caching.kv_cache import build_cache
from service_specials.app.specials.service import SpecialsService


class SpecialsApplication:
    """Owns the client, cache and aggregator for one process."""

    def __init__(
        self,
        settings: Optional[SpecialsSettings] = None,
        *,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.settings = settings or get_settings()
        configure_logging("specials", self.settings.log_level)
        self.logger = get_logger("specials.main")
        self.metrics = metrics or get_metrics_collector("specials")

        if not self.settings.dutchie_api_key:
            self.logger.warning("DUTCHIE_API_KEY is not set; upstream requests will be rejected")

        # Cache first: an unknown backend fails before any connection is opened
        self.cache = build_cache(self.settings)
        self.client = DutchieClient(self.settings)
        self.service = SpecialsService(
            self.client,
            self.cache,
            metrics=self.metrics,
            cache_ttl_seconds=self.settings.cache_ttl_seconds,
            batch_size=self.settings.batch_size,
        )
        self.logger.info(
            "Specials service configured",
            env=self.settings.env,
            cache_backend=type(self.cache).__name__,
            batch_size=self.settings.batch_size,
        )

    async def __aenter__(self) -> "SpecialsApplication":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Release HTTP and cache connections."""
        await self.client.close()
        await self.cache.close()


def build_service(settings: Optional[SpecialsSettings] = None) -> SpecialsApplication:
    """Create the specials application from settings (environment by default)."""
    return SpecialsApplication(settings)
