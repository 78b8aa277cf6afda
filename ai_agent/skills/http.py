"""Outbound HTTP skill."""

from __future__ import annotations

from typing import Any, Literal, Union

import httpx
from pydantic import BaseModel, Field

from ai_agent.skills.base import ResultCallback, Skill
from ai_agent.utils.http import is_url_allowed


class HttpParams(BaseModel):
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"] = "GET"
    url: str
    body: Any = None
    query_params: dict[str, Union[str, list[str]]] = Field(default_factory=dict)
    http_header: dict[str, str] = Field(default_factory=dict)


class HttpSkill(Skill):
    """Send HTTP requests on behalf of the model.

    When ``allowed_urls`` is non-empty, only URLs matching one of its entries
    may be requested.
    """

    description = """Send an HTTP request and return the status code and response body.
Parameters:
- method: string - GET (default), POST, PUT, PATCH, DELETE or HEAD
- url: string - absolute URL
- body: string or object - request body; objects are sent as JSON
- query_params: object - query string parameters
- http_header: object - extra request headers"""
    params = HttpParams

    def __init__(self, client: httpx.AsyncClient, allowed_urls: list[str] | None = None) -> None:
        self.client = client
        self.allowed_urls = list(allowed_urls or [])

    async def execute(self, params: HttpParams, on_result: ResultCallback) -> None:
        if not is_url_allowed(params.url, self.allowed_urls):
            raise PermissionError(f"url '{params.url}' is not allowed")

        kwargs: dict[str, Any] = {"params": params.query_params, "headers": params.http_header}
        if isinstance(params.body, str):
            kwargs["content"] = params.body
        elif params.body is not None:
            kwargs["json"] = params.body

        resp = await self.client.request(params.method, params.url, **kwargs)
        await on_result({"status_code": resp.status_code, "body": resp.text})
