"""HTTP client for LoadTest resources served by a Kubernetes API server."""

from __future__ import annotations

import platform
from typing import Any

import requests

from loadtestkit.types import GROUP_VERSION, LoadTest, LoadTestList

_RESOURCE = "loadtests"
_API_PATH = "/apis"


def _default_user_agent() -> str:
    system = platform.system().lower() or "unknown"
    machine = platform.machine().lower() or "unknown"
    return f"loadtestkit ({system}/{machine})"


class ClientError(Exception):
    """Raised when a request to the API server fails."""

    def __init__(
        self, message: str, status_code: int | None = None, reason: str = ""
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason


def _error_from_response(response: requests.Response) -> ClientError:
    message = ""
    reason = ""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = str(payload.get("message") or "")
        reason = str(payload.get("reason") or "")
    if not message:
        message = response.text.strip() or response.reason or "request failed"
    return ClientError(
        f"{response.request.method} {response.url} returned "
        f"{response.status_code}: {message}",
        status_code=response.status_code,
        reason=reason,
    )


class LoadTestClient:
    """Client for the load test API group of a Kubernetes cluster."""

    def __init__(
        self,
        host: str,
        *,
        token: str | None = None,
        user_agent: str | None = None,
        session: requests.Session | None = None,
        verify: bool | str = True,
        timeout: float | None = None,
    ) -> None:
        self._host = host.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._verify = verify
        self._timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent or _default_user_agent(),
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    @property
    def base_path(self) -> str:
        """Path prefix of every resource in the load test API group."""
        return f"{_API_PATH}/{GROUP_VERSION.group}/{GROUP_VERSION.version}"

    def load_tests(self, namespace: str) -> LoadTestGetter:
        """Operations on the load tests in ``namespace``."""
        return LoadTestGetter(self, namespace)

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        url = self._host + path
        try:
            response = self._session.request(
                method,
                url,
                json=body,
                headers=self._headers,
                verify=self._verify,
                timeout=self._timeout,
            )
        except requests.RequestException as err:
            raise ClientError(f"{method} {url} failed: {err}") from err

        if not response.ok:
            raise _error_from_response(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as err:
            raise ClientError(
                f"{method} {url} returned a body that is not JSON",
                status_code=response.status_code,
            ) from err


class LoadTestGetter:
    """Create, fetch, list and delete load tests in one namespace."""

    def __init__(self, client: LoadTestClient, namespace: str) -> None:
        self._client = client
        self.namespace = namespace

    def _collection_path(self) -> str:
        base = self._client.base_path
        if self.namespace:
            base = f"{base}/namespaces/{self.namespace}"
        return f"{base}/{_RESOURCE}"

    def _item_path(self, name: str) -> str:
        if not name:
            raise ClientError("resource name may not be empty")
        return f"{self._collection_path()}/{name}"

    def create(self, test: LoadTest) -> LoadTest:
        """Save a new load test and return it as stored by the server."""
        data = self._client._request("POST", self._collection_path(), test.to_dict())
        return LoadTest.from_dict(data or {})

    def get(self, name: str) -> LoadTest:
        """Fetch the load test called ``name``."""
        data = self._client._request("GET", self._item_path(name))
        return LoadTest.from_dict(data or {})

    def list(self) -> LoadTestList:
        """Fetch all load tests in the namespace."""
        data = self._client._request("GET", self._collection_path())
        return LoadTestList.from_dict(data or {})

    def delete(self, name: str) -> None:
        """Remove the load test called ``name``."""
        self._client._request(
            "DELETE",
            self._item_path(name),
            {"kind": "DeleteOptions", "apiVersion": "v1"},
        )