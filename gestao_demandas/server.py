"""Process entry point.

Signal handling:
- SIGINT stops gracefully: in-flight requests finish, the lifespan shutdown
  runs and a final "shutdown" snapshot is written.
- SIGTERM exits immediately, skipping the lifespan shutdown and therefore
  the final snapshot.
"""

import signal
from types import FrameType

import uvicorn

from gestao_demandas.api.app import create_app
from gestao_demandas.config import get_settings
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


class DemandasServer(uvicorn.Server):
    """uvicorn server that treats SIGTERM as an immediate exit."""

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if sig == signal.SIGTERM:
            logger.warning("sigterm_received", action="exit_without_snapshot")
            self.force_exit = True
        else:
            logger.info("shutdown_signal_received", signal=signal.Signals(sig).name)
        super().handle_exit(sig, frame)


def main() -> None:
    """Run the HTTP server with the configured host and port."""
    settings = get_settings()
    app = create_app()
    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        lifespan="on",
        log_config=None,
    )
    logger.info("server_starting", host=settings.api.host, port=settings.api.port)
    DemandasServer(config).run()
