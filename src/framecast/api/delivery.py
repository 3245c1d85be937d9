"""Streaming the composited file back and removing it afterwards."""

import logging
from pathlib import Path

from fastapi.responses import FileResponse
from starlette.types import Message, Receive, Scope, Send

from framecast.models.errors import DeliveryFailed
from framecast.storage.temp_store import ScratchStore

logger = logging.getLogger(__name__)


class CleanupFileResponse(FileResponse):
    """FileResponse that deletes its file once the transfer ends, however it ends."""

    def __init__(self, path: Path, store: ScratchStore, filename: str):
        super().__init__(path, media_type="video/mp4", filename=filename)
        self.store = store

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = False

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await super().__call__(scope, receive, tracking_send)
        except Exception as e:
            logger.error("Error sending processed video %s: %s", self.filename, e)
            if not started:
                raise DeliveryFailed("Error sending processed video") from e
            raise
        else:
            logger.info("Delivered %s", self.filename)
        finally:
            self.store.delete(Path(self.path))
