import asyncio
import logging

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    One-shot cancellation signal shared by every target scheduler.

    Only ``cancel()`` flips the token, and only once; schedulers poll
    ``is_cancelled()`` at tick boundaries or ``await wait()`` while idle.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """
        Trigger cancellation.

        Returns:
            bool: True if this call cancelled the token, False if it was already cancelled.
        """
        if self._event.is_set():
            return False
        self._event.set()
        logger.debug("Cancellation token triggered.")
        return True

    async def wait(self):
        await self._event.wait()
