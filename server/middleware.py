"""ASGI middleware guarding the upload endpoint."""

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from common.logging_config import get_logger
from server.exceptions import PayloadTooLargeError
from server.schemas.common import ErrorResponse

logger = get_logger('server.middleware')

MULTIPART_OVERHEAD_BYTES = 64 * 1024


class UploadSizeLimitMiddleware:
    """
    Reject upload bodies larger than the configured limit while they are received.

    The limit is max_upload_bytes plus MULTIPART_OVERHEAD_BYTES, which leaves room
    for multipart boundaries and the uploadedBy field on top of the file itself.
    A declared Content-Length over the limit is refused before any body is read.
    Bodies without one (chunked transfer) are counted message by message and cut
    off as soon as the count passes the limit, so nothing beyond it is spooled.
    """

    def __init__(self, app: ASGIApp, path: str, max_upload_bytes: int):
        self.app = app
        self.path = path
        self.max_upload_bytes = max_upload_bytes
        self.limit = max_upload_bytes + MULTIPART_OVERHEAD_BYTES

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "POST" or scope["path"] != self.path:
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.limit:
            logger.warning(f"Upload rejected at ingress: Content-Length {content_length} > {self.limit}")
            await self._reject(scope, receive, send)
            return

        received = 0
        exceeded = False
        rejected = False

        async def counting_receive() -> Message:
            nonlocal received, exceeded
            if exceeded:
                raise PayloadTooLargeError(self._message())
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.limit:
                    exceeded = True
                    logger.warning(f"Upload rejected at ingress: body passed {self.limit} bytes")
                    raise PayloadTooLargeError(self._message())
            return message

        async def guarded_send(message: Message) -> None:
            nonlocal rejected
            # Whatever the app answers after the cut-off is replaced by the 413.
            if exceeded:
                if not rejected:
                    rejected = True
                    await self._reject(scope, receive, send)
                return
            await send(message)

        try:
            await self.app(scope, counting_receive, guarded_send)
        except Exception:
            if not exceeded or rejected:
                raise
        if exceeded and not rejected:
            rejected = True
            await self._reject(scope, receive, send)

    def _message(self) -> str:
        return f"File exceeds the maximum upload size of {self.max_upload_bytes} bytes"

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(
            status_code=PayloadTooLargeError.status_code,
            content=ErrorResponse(error=self._message(), code=PayloadTooLargeError.code).model_dump(),
        )
        await response(scope, receive, send)
