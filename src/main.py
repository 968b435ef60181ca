"""
Main entry point for the nebularr reconciler.

Loads instance definitions, builds the adapter registry and runs the
controller (plus the status API when enabled) until SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal
from typing import List, Optional

from adapters.registry import AdapterRegistry, default_registry
from api import StatusServer, create_app
from config import Config, get_config
from controller import Controller
from events import EventBus
from instances import load_instances

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class Application:
    """Main application that wires the registry, controller and API together."""

    def __init__(self, config: Optional[Config] = None, registry: Optional[AdapterRegistry] = None):
        self.config = config or get_config()
        self.registry = registry
        self.controller: Optional[Controller] = None
        self.event_bus: Optional[EventBus] = None
        self.server: Optional[StatusServer] = None
        self.running = False

    def initialize(self) -> None:
        """Initialize all components."""
        logger.info("Initializing nebularr")

        if self.registry is None:
            self.registry = default_registry(
                timeout=self.config.http.timeout,
                user_agent=self.config.http.user_agent,
            )
        logger.info(f"Adapters available: {', '.join(self.registry.list())}")

        instances = load_instances(
            self.config.instances.path,
            secrets_prefix=self.config.instances.secrets_prefix,
        )

        self.event_bus = EventBus()
        self.controller = Controller(
            instances=instances,
            registry=self.registry,
            config=self.config.controller,
            event_bus=self.event_bus,
        )

        if self.config.api.enabled:
            self.server = StatusServer(
                create_app(self.controller, self.event_bus),
                host=self.config.api.host,
                port=self.config.api.port,
                log_level=self.config.api.log_level,
            )

        logger.info("All components initialized")

    async def start(self) -> None:
        """Start the application."""
        if self.controller is None:
            self.initialize()

        self.running = True
        logger.info("Starting nebularr")

        tasks: List[asyncio.Task] = [asyncio.create_task(self.controller.start())]
        if self.server is not None:
            tasks.append(asyncio.create_task(self.server.start()))

        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            logger.info("Application tasks cancelled")

    async def stop(self) -> None:
        """Stop the application gracefully."""
        if not self.running:
            return
        logger.info("Stopping nebularr")
        self.running = False

        if self.controller:
            await self.controller.stop()
        if self.server:
            await self.server.stop()

        logger.info("nebularr stopped")


async def main():
    """Main entry point."""
    config = get_config()
    configure_logging(config.api.log_level)
    app = Application(config)

    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(app.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await app.start()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        await app.stop()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
