"""Cancel in-flight requests whose client has gone away."""
import asyncio
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class CancelOnDisconnectMiddleware:
    """
    Pure ASGI middleware that cancels the handler task on client disconnect.

    Starlette keeps running a handler after its client disconnects. Here the
    request body is buffered up front so a watcher can own ``receive``; when
    it sees ``http.disconnect`` before the response has been sent, the
    handler task is cancelled, which cancels the backend call it is awaiting.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        messages: asyncio.Queue[Message] = asyncio.Queue()

        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                logger.info("client %s disconnected before %s was handled", client, scope.get("path"))
                return
            messages.put_nowait(message)
            if not message.get("more_body", False):
                break

        response_complete = False
        disconnected = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_complete
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                response_complete = True
            await send(message)

        handler = asyncio.ensure_future(self.app(scope, messages.get, send_wrapper))

        async def watch_disconnect() -> None:
            nonlocal disconnected
            while True:
                message = await receive()
                if message["type"] != "http.disconnect":
                    continue
                messages.put_nowait(message)
                if not response_complete and not handler.done():
                    disconnected = True
                    handler.cancel()
                return

        watcher = asyncio.ensure_future(watch_disconnect())
        try:
            await handler
        except asyncio.CancelledError:
            if not disconnected:
                raise
            logger.info("client %s disconnected, cancelled %s", client, scope.get("path"))
        finally:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)
