"""Application entry point for NoteVault server."""

import structlog

from notevault.app import App
from notevault.config import Config
from notevault.logging import setup_logging
from notevault.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    structlog.get_logger(__name__).info("server_starting", host=config.host, port=config.port)
    run_server(App(config), config)


if __name__ == "__main__":
    main()
