import json
import time
from typing import Any

import httpx

from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.exceptions import (
    AgentNetworkError,
    AgentParseError,
    AgentTimeoutError,
    AgentTransportError,
)
from docexplain.analysis.models import CompletionRequest, CompletionResult
from docexplain.logging.logger import Log, preview

_HTML_MARKERS = ("<!doctype html", "<html")


def looks_like_html(body: str) -> bool:
    """Return True if a response body is an HTML page rather than JSON."""
    head = body.lstrip()[:512].lower()
    return any(marker in head for marker in _HTML_MARKERS)


class MistralClientAdapter(BaseAgentClient):
    """Agent client built on the Mistral files and agents REST API."""

    FILES_PATH = "/files"
    COMPLETIONS_PATH = "/agents/completions"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout_seconds: float,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._client = http_client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self._timeout_seconds = timeout_seconds
        self._headers = {"Authorization": f"Bearer {api_key}"}

    def upload_file(self, filename: str, content: bytes) -> str:
        body = self._send(
            "POST",
            self.FILES_PATH,
            files={"file": (filename, content, "application/pdf")},
            data={"purpose": "ocr"},
        )
        data = self._parse_json(body)
        file_id = data.get("id")
        if not isinstance(file_id, str) or not file_id:
            raise AgentParseError("unexpected_shape", "File upload returned no id", body)
        Log.info("File uploaded", file_id=file_id, size_bytes=len(content))
        return file_id

    def get_signed_url(self, file_id: str) -> str:
        body = self._send("GET", f"{self.FILES_PATH}/{file_id}/url")
        data = self._parse_json(body)
        url = data.get("url")
        if not isinstance(url, str) or not url:
            raise AgentParseError("unexpected_shape", "Signed URL response has no url", body)
        return url

    def delete_file(self, file_id: str) -> None:
        self._send("DELETE", f"{self.FILES_PATH}/{file_id}")

    def create_completion(
        self,
        request: CompletionRequest,
        *,
        timeout_seconds: float | None = None,
    ) -> CompletionResult:
        body = self._send(
            "POST",
            self.COMPLETIONS_PATH,
            timeout_seconds=timeout_seconds,
            json=request.to_payload(),
        )
        Log.debug("Agent response preview", body=preview(body))
        data = self._parse_json(body)
        return CompletionResult(markdown=self._extract_content(data, body))

    def close(self) -> None:
        self._client.close()

    def _send(
        self,
        method: str,
        path: str,
        *,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Send one request and return its body text.

        ``timeout_seconds`` caps the whole call, headers and body included.
        httpx timeouts only bound each read, so a slowly trickling body is
        cut off here.

        Raises:
            AgentTimeoutError: if the deadline passes or httpx times out.
            AgentNetworkError: if the API cannot be reached.
            AgentTransportError: on a non-success status.
        """
        limit = timeout_seconds if timeout_seconds is not None else self._timeout_seconds
        deadline = time.monotonic() + limit
        try:
            with self._client.stream(
                method, path, headers=self._headers, timeout=limit, **kwargs
            ) as response:
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        raise AgentTimeoutError(f"{method} {path} exceeded {limit}s")
                body = b"".join(chunks).decode(
                    response.charset_encoding or "utf-8", errors="replace"
                )
        except httpx.TimeoutException as exc:
            raise AgentTimeoutError(f"{method} {path} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise AgentNetworkError(f"{method} {path} failed: {exc}") from exc

        if not response.is_success:
            Log.error(
                "Agent API returned an error status",
                method=method,
                path=path,
                status=response.status_code,
                body=preview(body),
            )
            raise AgentTransportError(response.status_code, body)
        return body

    @staticmethod
    def _parse_json(body: str) -> dict[str, Any]:
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError as exc:
            if looks_like_html(body):
                raise AgentParseError(
                    "html_error_page", "Agent API returned an HTML error page", body
                ) from exc
            raise AgentParseError("malformed_json", f"Invalid JSON response: {exc}", body) from exc
        if not isinstance(parsed, dict):
            raise AgentParseError("unexpected_shape", "JSON response must be an object", body)
        return parsed

    @staticmethod
    def _extract_content(data: dict[str, Any], body: str) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise AgentParseError("unexpected_shape", "Agent returned no choices", body)
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise AgentParseError("unexpected_shape", "Agent returned empty response", body)
        return content
