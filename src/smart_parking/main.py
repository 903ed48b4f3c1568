"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .api.handlers import register_exception_handlers
from .api.router import init_router, router
from .config import AppConfig, get_config_path, load_config_or_default
from .state.booking_ledger import BookingLedger
from .state.repositories import BookingRepository, SlotRepository
from .state.seed import seed_parking
from .state.slot_registry import SlotRegistry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global state
config: AppConfig | None = None
slot_registry: SlotRegistry | None = None
booking_ledger: BookingLedger | None = None


def build_services(cfg: AppConfig) -> tuple[SlotRegistry, BookingLedger]:
    """
    Wire repositories, registry and ledger, seeding demo data if enabled.

    Args:
        cfg: Application configuration

    Returns:
        The slot registry and booking ledger sharing one store
    """
    slot_repository = SlotRepository()
    booking_repository = BookingRepository()

    registry = SlotRegistry(slot_repository)
    ledger = BookingLedger(booking_repository, registry)

    if cfg.seed.enabled:
        result = seed_parking(registry, booking_repository, cfg.seed)
        logger.info(
            f"Seeded {result.slots_created} slots and {result.bookings_created} bookings"
        )

    return registry, ledger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global config, slot_registry, booking_ledger

    logger.info("Starting Smart Parking service...")

    config_path = get_config_path()
    config = load_config_or_default(config_path)
    logging.getLogger().setLevel(config.log_level)
    logger.info(f"Loaded configuration from {config_path}")

    slot_registry, booking_ledger = build_services(config)
    init_router(slot_registry, booking_ledger)

    logger.info(f"Smart Parking ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Smart Parking",
    description="API for reserving parking slots and managing slot inventory",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(router, prefix="/api")


def main():
    """Run the application."""
    # Load config just to get API settings
    cfg = load_config_or_default(get_config_path())

    uvicorn.run(
        "smart_parking.main:app",
        host=cfg.api.host,
        port=cfg.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
