"""Shared httpx plumbing for provider adapters."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..exceptions import ProviderError


class HttpProvider:
    """Owns one ``httpx.Client`` with an explicit timeout and a small retry loop.

    Every failure mode (transport error, timeout, HTTP status, undecodable
    body) surfaces as ``ProviderError`` so callers have a single failure path.
    """

    provider_name = "http"

    def __init__(
        self,
        *,
        base_url: str,
        user_agent: str,
        timeout_seconds: float,
        logger: logging.Logger,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        accept: str = "application/json",
    ) -> None:
        self.logger = logger
        self._max_retries = max_retries
        self._retry_delay = retry_delay_seconds
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            headers={"Accept": accept, "User-Agent": user_agent},
        )

    def __enter__(self) -> HttpProvider:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        url: str,
        *,
        context: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._client.get(url, params=params)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                # Don't retry 4xx client errors except 429 rate-limit.
                if 400 <= status < 500 and status != 429:
                    raise ProviderError(
                        f"{self.provider_name} {context} failed with status {status} "
                        f"at {url}: {exc.response.text[:300]}"
                    ) from exc
                last_error = exc
                if attempt < self._max_retries:
                    self.logger.warning(
                        "%s %s failed (HTTP %d); retrying",
                        self.provider_name, context, status,
                        extra={"provider": self.provider_name},
                    )
                    time.sleep(self._retry_delay)
                    continue
                raise ProviderError(
                    f"{self.provider_name} {context} failed with status {status} at {url}."
                ) from exc
            except httpx.HTTPError as exc:
                last_error = exc
                if attempt < self._max_retries:
                    self.logger.warning(
                        "%s %s request failed (%s); retrying",
                        self.provider_name, context, type(exc).__name__,
                        extra={"provider": self.provider_name},
                    )
                    time.sleep(self._retry_delay)
                    continue
                raise ProviderError(
                    f"{self.provider_name} {context} request failed at {url}: {exc}"
                ) from exc

        raise ProviderError(
            f"{self.provider_name} {context} failed after retries: {last_error}"
        )

    def _request_json(
        self,
        url: str,
        *,
        context: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        response = self._request(url, context=context, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(
                f"{self.provider_name} {context} returned non-JSON response at {url}."
            ) from exc

    def _request_text(
        self,
        url: str,
        *,
        context: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        return self._request(url, context=context, params=params).text
