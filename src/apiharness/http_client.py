from __future__ import annotations

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = {"GET", "POST", "PUT", "DELETE"}


def send_request(params: dict) -> dict:
    method = params.get("method")
    url = params.get("url")
    headers = params.get("headers")
    body = params.get("body")
    timeout = params.get("timeout")
    method = str(method).upper() if method is not None else None

    if not method:
        return _failure("InvalidMethod", "method is required")

    if method not in SUPPORTED_METHODS:
        return _failure("InvalidMethod", f"unsupported method: {method}")

    if not url:
        return _failure("InvalidURL", "url is required")

    request_kwargs: dict[str, Any] = {
        "method": method,
        "url": url,
        "headers": headers,
        "timeout": timeout,
    }
    if body is not None:
        if method == "GET":
            request_kwargs["params"] = body
        elif isinstance(body, (str, bytes)):
            request_kwargs["data"] = body
        else:
            request_kwargs["json"] = body

    logger.info("Executing %s request to: %s", method, url)
    for name, value in (headers or {}).items():
        logger.debug("Adding header: %s = %s", name, value)
    if body is not None:
        logger.debug("Request body: %s", body)

    try:
        response = requests.request(**request_kwargs)
    except requests.exceptions.Timeout as exc:
        logger.warning("%s %s timed out: %s", method, url, exc)
        return _failure("Timeout", str(exc))
    except requests.exceptions.ConnectionError as exc:
        logger.warning("%s %s connection failed: %s", method, url, exc)
        return _failure("ConnectionError", str(exc))
    except requests.RequestException as exc:
        logger.warning("%s %s failed: %s", method, url, exc)
        return _failure("RequestException", str(exc))

    _fix_encoding(response)
    response_text = response.text
    elapsed_ms = int(response.elapsed.total_seconds() * 1000)
    try:
        response_json = response.json()
    except ValueError:
        response_json = None
    logger.info(
        "%s request executed. Status: %s (%d ms)", method, response.status_code, elapsed_ms
    )
    return {
        "success": True,
        "method": method,
        "url": url,
        "status_code": response.status_code,
        "headers": dict(response.headers),
        "response_text": response_text,
        "response_json": response_json,
        "elapsed_ms": elapsed_ms,
    }


def _fix_encoding(response: requests.Response) -> None:
    apparent = response.apparent_encoding
    if not apparent:
        return
    # requests falls back to latin-1 for text/* without a charset
    if response.encoding is None or response.encoding.lower() in {"iso-8859-1", "latin-1"}:
        response.encoding = apparent


def _failure(error_type: str, message: str) -> dict:
    return {
        "success": False,
        "error_type": error_type,
        "error_message": message,
    }


class RestClient:
    """Bind a base URL, default headers and a timeout to ``send_request``."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path:
            return self.base_url
        return f"{self.base_url}/{path.lstrip('/')}"

    def send_request(self, params: dict) -> dict:
        merged = dict(params)
        merged["url"] = self.url_for(str(params.get("url") or ""))
        merged["headers"] = {**self.headers, **(params.get("headers") or {})}
        if merged.get("timeout") is None:
            merged["timeout"] = self.timeout
        return send_request(merged)

    def get(self, path: str, headers: dict | None = None, params: dict | None = None) -> dict:
        return self.send_request({"method": "GET", "url": path, "headers": headers, "body": params})

    def post(self, path: str, body: Any, headers: dict | None = None) -> dict:
        return self.send_request({"method": "POST", "url": path, "headers": headers, "body": body})

    def put(self, path: str, body: Any, headers: dict | None = None) -> dict:
        return self.send_request({"method": "PUT", "url": path, "headers": headers, "body": body})

    def delete(self, path: str, headers: dict | None = None) -> dict:
        return self.send_request({"method": "DELETE", "url": path, "headers": headers})
