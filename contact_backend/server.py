"""
Process entry point.

Runs uvicorn with a graceful shutdown on SIGINT, SIGTERM and SIGHUP and maps
the outcome to the process exit code: 0 after a graceful shutdown, 1 when the
configuration is invalid, the listener cannot bind, or the database connector
gives up.
"""

import contextlib
import logging
import os
import signal
import sys
import threading
from typing import Optional

import uvicorn
from pydantic import ValidationError

from contact_backend.core.config import get_settings

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGHUP") if hasattr(signal, name)
)


class ContactServer(uvicorn.Server):
    """uvicorn server that treats every shutdown signal the same way."""

    @contextlib.contextmanager
    def capture_signals(self):
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in SHUTDOWN_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)


_server: Optional[ContactServer] = None
_exit_code = 0


def request_exit(code: int):
    """Ask the running server to shut down gracefully and exit with ``code``."""
    global _exit_code
    _exit_code = max(_exit_code, code)

    if _server is None:
        # Not started through run(), e.g. a bare `uvicorn contact_backend.main:app`
        logger.error(f"No managed server to stop, exiting with code {code}")
        os._exit(code)
    else:
        logger.info(f"Shutdown requested (exit code {code})")
        _server.should_exit = True


def run():
    global _server

    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"❌ Invalid configuration: {str(e)}")
        sys.exit(1)

    config = uvicorn.Config(
        "contact_backend.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    _server = ContactServer(config)
    # uvicorn itself exits with code 1 if the socket cannot be bound
    _server.run()
    sys.exit(_exit_code)


if __name__ == "__main__":
    run()
