"""
Main entry point for the Arnela booking client.
Builds the booking services from settings and checks backend connectivity.
"""

import asyncio
import logging
from typing import Optional

from dotenv import load_dotenv

from config.settings import Settings, get_settings
from .booking import AppointmentActions, BookingCalendar, BookingWizard, ClientSearch, WizardVariant
from .errors import ApiError
from .services import AppointmentStore, ArnelaApiClient, LogNotifier, Notifier, OptimisticUpdater

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class BookingServices:
    """Holds the collaborators shared by every booking component."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api: Optional[ArnelaApiClient] = None,
        notifier: Optional[Notifier] = None,
    ):
        """Initialize the services from settings."""
        self.settings = settings or get_settings()
        self.api = api or ArnelaApiClient.from_settings(self.settings)
        self.notifier = notifier or LogNotifier()
        self.store = AppointmentStore()
        self.updater = OptimisticUpdater(self.notifier)
        self.calendar = BookingCalendar(
            booking_weekdays=self.settings.booking_weekdays,
            horizon_months=self.settings.booking_horizon_months,
        )
        self.actions = AppointmentActions(
            api=self.api,
            store=self.store,
            notifier=self.notifier,
            updater=self.updater,
        )

        logger.info(f"Booking services initialized against {self.settings.api_base_url}")

    def create_wizard(self, variant: WizardVariant = WizardVariant.PORTAL) -> BookingWizard:
        """Create a new wizard instance sharing this container's store."""
        client_search = None
        if variant == WizardVariant.BACKOFFICE:
            client_search = ClientSearch(
                self.api.search_clients,
                debounce_ms=self.settings.search_debounce_ms,
                min_chars=self.settings.search_min_chars,
            )
        return BookingWizard(
            api=self.api,
            notifier=self.notifier,
            variant=variant,
            calendar=self.calendar,
            client_search=client_search,
            store=self.store,
            default_duration=self.settings.default_duration_minutes,
            default_room=self.settings.default_room,
        )

    async def close(self) -> None:
        await self.api.close()


async def check_backend(services: BookingServices) -> bool:
    """Load the provider list to verify the backend and token are usable."""
    try:
        providers = await services.api.list_providers()
    except ApiError as e:
        logger.error(f"Backend check failed: {e.user_message} ({e})")
        return False

    logger.info(f"Backend reachable, {len(providers)} provider(s) available")
    for provider in providers:
        logger.info(f"  {provider.id}: {provider.name}")
    return True


async def _run() -> bool:
    services = BookingServices()
    try:
        return await check_backend(services)
    finally:
        await services.close()


def main():
    """Main entry point."""
    # override=True ensures .env values take precedence
    load_dotenv(override=True)
    configure_logging(get_settings())
    ok = asyncio.run(_run())
    raise SystemExit(0 if ok else 1)


if __name__ == "__main__":
    main()
