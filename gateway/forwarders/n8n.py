#  StyleMirror Gateway - n8n Webhook Forwarder
#
#  Transparent proxy to n8n webhooks: /api/n8n/<rest> -> <base>/webhook/<rest>.
#  <rest> arrives percent-encoded from the classifier and is sent as-is.
#  Method, body, Content-Type and Authorization are forwarded; the upstream
#  status and body come back unchanged.
#
#  Depends on: forwarders/base.py
#  Used by:    container.py

import httpx
from starlette.requests import Request
from starlette.responses import Response

from gateway.exceptions import UpstreamError
from gateway.forwarders.base import UpstreamForwarder

DEFAULT_CONTENT_TYPE = "application/json"


class N8nForwarder(UpstreamForwarder):
    name = "n8n"

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: float):
        super().__init__(http_client, timeout)
        self._base_url = base_url.rstrip("/")

    def webhook_url(self, sub_path: str) -> httpx.URL:
        """Join the base URL and an already percent-encoded sub-path.

        Set as raw_path so httpx does not decode or re-split it.
        """
        base = httpx.URL(self._base_url)
        return base.copy_with(raw_path=base.raw_path.rstrip(b"/") + sub_path.encode("ascii"))

    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        if not self._base_url:
            raise UpstreamError("n8n webhook base URL is not configured")

        headers = {"Content-Type": request.headers.get("content-type") or DEFAULT_CONTENT_TYPE}
        auth = request.headers.get("authorization")
        if auth:
            headers["Authorization"] = auth

        content = None
        if request.method != "GET":
            content = await request.body()

        resp = await self._send(
            request.method,
            self.webhook_url(sub_path or ""),
            headers=headers,
            content=content,
        )
        return Response(
            content=resp.content,
            status_code=resp.status_code,
            media_type=resp.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        )
