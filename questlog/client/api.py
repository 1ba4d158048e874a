"""
Async HTTP client for the Questlog API.

Rate-limited (429) responses are retried with exponential backoff, honoring
Retry-After when the server sends one. Transport failures, 5xx responses and
exhausted retries raise StoreUnavailable; other HTTP errors propagate as
httpx.HTTPStatusError.
"""

import asyncio
import logging
from datetime import date
from typing import Any

import httpx

from questlog.schemas.auth import TokenResponse
from questlog.schemas.data import AppSnapshot
from questlog.schemas.progress import SessionDraft, SubjectProgress
from questlog.schemas.sessions import SessionRecorded

logger = logging.getLogger(__name__)


class StoreUnavailable(Exception):
    """The backing store could not be reached or did not answer usefully."""


class QuestlogClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        base_delay: float = 0.5,
    ):
        self.token = token
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "QuestlogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return max(0.0, float(retry_after))
            except ValueError:
                pass
        return self.base_delay * (2 ** attempt)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        for attempt in range(self.max_attempts):
            try:
                response = await self._http.request(method, path, headers=headers, **kwargs)
            except httpx.TransportError as e:
                raise StoreUnavailable(f"{method} {path}: {e}") from e

            if response.status_code == 429:
                if attempt < self.max_attempts - 1:
                    delay = self._retry_delay(response, attempt)
                    logger.warning(
                        "Rate limited on %s %s (attempt %d/%d), retrying in %.1fs",
                        method, path, attempt + 1, self.max_attempts, delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise StoreUnavailable(f"{method} {path}: still rate limited after {self.max_attempts} attempts")

            if response.status_code >= 500:
                raise StoreUnavailable(f"{method} {path}: server error {response.status_code}")

            response.raise_for_status()
            return response

        raise StoreUnavailable(f"{method} {path}: no attempts made")

    async def login(self, email: str, password: str) -> TokenResponse:
        """Log in and keep the token for later requests."""
        response = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        token = TokenResponse.model_validate(response.json())
        self.token = token.access_token
        return token

    async def list_subjects(self) -> list[SubjectProgress]:
        response = await self._request("GET", "/subjects/")
        return [SubjectProgress.model_validate(item) for item in response.json()]

    async def get_subject(self, subject_id: str) -> SubjectProgress:
        response = await self._request("GET", f"/subjects/{subject_id}")
        return SubjectProgress.model_validate(response.json())

    async def record_session(self, draft: SessionDraft) -> SessionRecorded:
        response = await self._request("POST", "/sessions/", json=draft.model_dump(mode="json"))
        return SessionRecorded.model_validate(response.json())

    async def quick_pip(self, subject_id: str, on: date) -> SessionRecorded:
        response = await self._request(
            "POST", "/sessions/pip", json={"subject_id": subject_id, "date": on.isoformat()}
        )
        return SessionRecorded.model_validate(response.json())

    async def export_data(self) -> AppSnapshot:
        response = await self._request("GET", "/data/export")
        return AppSnapshot.model_validate(response.json())
