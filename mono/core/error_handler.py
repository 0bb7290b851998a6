"""Process-level error reporting."""

import asyncio
import logging

logger = logging.getLogger(__name__)


def setup_global_exception_handler() -> None:
    """Route uncaught asyncio task exceptions through the logging pipeline."""

    def handle_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exception = context.get("exception")
        message = context.get("message", "Unhandled exception in async task")

        if exception:
            logger.error("Asyncio exception handler caught: %s", message, exc_info=exception)
        else:
            logger.error("Asyncio exception handler caught: %s (context: %s)", message, context)

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop yet, will be set when loop starts
        logger.debug("No running loop to install exception handler yet")
        return
    loop.set_exception_handler(handle_exception)
    logger.info("Global asyncio exception handler installed")


__all__ = ["setup_global_exception_handler"]
