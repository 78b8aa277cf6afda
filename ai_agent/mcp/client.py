"""MCP (Model Context Protocol) client for ai-agent.

Speaks JSON-RPC 2.0 over one of two HTTP transports:

- ``stream`` (streamable HTTP): every request is a POST to the server URL,
  answered either with a JSON body or with a short ``text/event-stream``
  carrying the response message.
- ``sse`` (legacy): a long-lived GET event stream first announces the
  endpoint to POST requests to, then delivers every response as a
  ``message`` event.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any

import httpx
from loguru import logger

from ai_agent.errors import MCPError
from ai_agent.mcp.config import MCPServerConfig

PROTOCOL_VERSION = "2025-03-26"
SESSION_HEADER = "Mcp-Session-Id"


class MCPClient:
    """
    Client for a single MCP server.

    Supports:
    - initialize handshake and session id tracking
    - tools/list discovery with include/exclude filtering
    - tools/call returning content blocks as JSON strings
    """

    def __init__(
        self,
        name: str,
        config: MCPServerConfig,
        client: httpx.AsyncClient | None = None,
    ):
        self.name = name
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._tools: list[dict[str, Any]] = []
        self._initialized = False
        self._session_id: str | None = None
        self._next_id = 0

        # Legacy SSE transport state
        self._reader: asyncio.Task | None = None
        self._endpoint: str | None = None
        self._endpoint_ready: asyncio.Future | None = None
        self._pending: dict[int, asyncio.Future] = {}

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def uses_sse(self) -> bool:
        return self.config.transport == "sse"

    # ── Transport ─────────────────────────────────────────────────

    def _headers(self, accept: str = "application/json, text/event-stream") -> dict[str, str]:
        headers = {
            "Accept": accept,
            "Content-Type": "application/json",
            **self.config.headers,
        }
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        if self._session_id:
            headers[SESSION_HEADER] = self._session_id
        return headers

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = self._endpoint if self.uses_sse else self.url
        try:
            response = await self._client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"MCP server '{self.name}' unreachable: {e}")
            raise MCPError(f"MCP server '{self.name}' unreachable: {e}") from e

        if response.status_code >= 400:
            raise MCPError(f"MCP server '{self.name}' returned HTTP {response.status_code}: {response.text[:300]}")

        session_id = response.headers.get(SESSION_HEADER)
        if session_id:
            self._session_id = session_id
        return response

    async def _request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        self._next_id += 1
        request_id = self._next_id
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}}
        if self.uses_sse:
            message = await self._exchange_over_sse(payload, request_id)
        else:
            message = self._decode(await self._post(payload), request_id)

        if "error" in message:
            error = message["error"] or {}
            raise MCPError(f"MCP '{self.name}' {method} failed: {error.get('message', error)}")
        return message.get("result") or {}

    async def _notify(self, method: str) -> None:
        await self._post({"jsonrpc": "2.0", "method": method})

    def _decode(self, response: httpx.Response, request_id: int) -> dict[str, Any]:
        content_type = response.headers.get("content-type", "")
        try:
            if "text/event-stream" not in content_type:
                message = response.json()
                if isinstance(message, dict):
                    return message
                raise MCPError(f"MCP server '{self.name}' sent a non-object response")

            for line in response.text.splitlines():
                if not line.startswith("data:"):
                    continue
                message = json.loads(line[5:].strip())
                if isinstance(message, dict) and message.get("id") == request_id:
                    return message
        except ValueError as e:
            raise MCPError(f"MCP server '{self.name}' sent an undecodable response") from e
        raise MCPError(f"MCP server '{self.name}' sent no response for request {request_id}")

    # ── Legacy SSE transport ──────────────────────────────────────

    async def _open_event_stream(self) -> None:
        """Start reading the event stream and wait for the endpoint event."""
        self._endpoint_ready = asyncio.get_running_loop().create_future()
        self._reader = asyncio.create_task(self._read_events())
        try:
            self._endpoint = await asyncio.wait_for(self._endpoint_ready, self.config.timeout)
        except asyncio.TimeoutError as e:
            await self._close_event_stream()
            raise MCPError(f"MCP server '{self.name}' announced no endpoint within {self.config.timeout}s") from e
        except MCPError:
            await self._close_event_stream()
            raise
        logger.debug(f"MCP client '{self.name}' posting to {self._endpoint}")

    async def _read_events(self) -> None:
        headers = self._headers(accept="text/event-stream")
        headers.pop("Content-Type")
        try:
            async with self._client.stream(
                "GET", self.url, headers=headers, timeout=httpx.Timeout(self.config.timeout, read=None)
            ) as response:
                if response.status_code >= 400:
                    error = MCPError(
                        f"MCP server '{self.name}' returned HTTP {response.status_code} for the event stream"
                    )
                else:
                    event = "message"
                    async for line in response.aiter_lines():
                        if line.startswith("event:"):
                            event = line[6:].strip()
                        elif line.startswith("data:"):
                            self._handle_event(event, line[5:].strip())
                            event = "message"
                    error = MCPError(f"MCP server '{self.name}' closed the event stream")
        except httpx.HTTPError as e:
            logger.error(f"MCP server '{self.name}' unreachable: {e}")
            error = MCPError(f"MCP server '{self.name}' unreachable: {e}")

        self._initialized = False
        if self._endpoint_ready is not None and not self._endpoint_ready.done():
            self._endpoint_ready.set_exception(error)
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)

    def _handle_event(self, event: str, data: str) -> None:
        if event == "endpoint":
            if self._endpoint_ready is not None and not self._endpoint_ready.done():
                self._endpoint_ready.set_result(str(httpx.URL(self.url).join(data)))
            return

        try:
            message = json.loads(data)
        except ValueError:
            logger.warning(f"MCP server '{self.name}' sent an undecodable event: {data[:200]!r}")
            return
        if not isinstance(message, dict):
            return
        future = self._pending.get(message.get("id"))
        if future is not None and not future.done():
            future.set_result(message)

    async def _exchange_over_sse(self, payload: dict[str, Any], request_id: int) -> dict[str, Any]:
        if self._reader is None or self._reader.done():
            raise MCPError(f"MCP server '{self.name}' event stream is not open")

        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._post(payload)
            return await asyncio.wait_for(future, self.config.timeout)
        except asyncio.TimeoutError as e:
            raise MCPError(
                f"MCP server '{self.name}' did not answer {payload['method']} within {self.config.timeout}s"
            ) from e
        finally:
            self._pending.pop(request_id, None)

    async def _close_event_stream(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
        self._reader = None
        self._endpoint = None
        self._endpoint_ready = None

    # ── Protocol ──────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Run the initialize handshake and discover tools."""
        if self.uses_sse and self._reader is None:
            await self._open_event_stream()

        result = await self._request(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "ai-agent", "version": "0.1.0"},
            },
        )
        await self._notify("notifications/initialized")
        self._initialized = True

        server = result.get("serverInfo", {})
        logger.info(f"MCP client '{self.name}' connected to {self.url} ({server.get('name', 'unknown')})")
        await self.list_tools()

    async def list_tools(self) -> list[dict[str, Any]]:
        result = await self._request("tools/list")
        tools = result.get("tools", [])
        include = set(self.config.include_tools)
        exclude = set(self.config.exclude_tools)
        self._tools = [
            tool for tool in tools
            if (not include or tool.get("name") in include) and tool.get("name") not in exclude
        ]
        logger.info(f"Discovered {len(self._tools)} tools from {self.name}")
        return self._tools

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> list[str]:
        """
        Call a tool on the MCP server.

        Returns:
            Each content block of the result, serialized as JSON.

        Raises:
            MCPError: if the client is not initialized, the transport fails
                or the server flags the result with ``isError``.
        """
        if not self._initialized:
            raise MCPError(f"MCP client '{self.name}' not initialized")

        result = await self._request("tools/call", {"name": tool_name, "arguments": arguments})
        content = [block for block in result.get("content", []) if block]
        if result.get("isError"):
            detail = " ".join(block.get("text", "") for block in content if block.get("type") == "text")
            raise MCPError(f"error while calling mcp tool [{tool_name}]" + (f": {detail}" if detail else ""))
        return [json.dumps(block, ensure_ascii=False) for block in content]

    def get_tools(self) -> list[dict[str, Any]]:
        return self._tools

    def describe_tools(self) -> list[str]:
        """Discovered tool definitions as JSON strings, for prompt catalogues."""
        return [json.dumps(tool, ensure_ascii=False) for tool in self._tools]

    def is_available(self) -> bool:
        return self._initialized

    async def close(self):
        """Stop the event stream, if any, and close the HTTP client."""
        await self._close_event_stream()
        await self._client.aclose()
        self._initialized = False
