"""HTTP client for the Peridio API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from peridio.errors import APIRequestError, APIUnavailableError

logger = logging.getLogger(__name__)


def sdk_version() -> str:
    try:
        return pkg_version("peridio-cli")
    except PackageNotFoundError:
        return "0.0.0+local"


@dataclass(frozen=True)
class APIRequest:
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    json_payload: dict[str, Any] | None = None


def _error_detail(body: object) -> object | None:
    if not isinstance(body, dict):
        return None
    for key in ("errors", "detail", "message"):
        if key in body:
            return body[key]
    return None


@dataclass
class APIClient:
    base_url: str
    api_key: str | None = None
    timeout: float = 10.0
    retries: int = 2
    ca_path: str | None = None

    def __post_init__(self) -> None:
        self._session = requests.Session()
        retry = Retry(
            total=max(0, int(self.retries)),
            connect=max(0, int(self.retries)),
            read=max(0, int(self.retries)),
            status=max(0, int(self.retries)),
            status_forcelist=(429, 500, 502, 503, 504),
            backoff_factor=0.2,
            allowed_methods=("GET", "PUT", "DELETE"),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": f"peridio-cli/{sdk_version()}"}
        if self.api_key:
            headers["Authorization"] = f"Token {self.api_key}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_payload: dict[str, Any] | None = None,
    ) -> dict | None:
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                params=params or None,
                json=json_payload,
                headers=self._headers(),
                timeout=self.timeout,
                verify=self.ca_path or True,
            )
        except requests.RequestException as exc:
            raise APIUnavailableError(str(exc)) from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.status_code >= 400:
            try:
                body: object | None = response.json()
            except ValueError:
                body = None
            detail = _error_detail(body)
            if detail is not None:
                message = f"api request failed: {response.status_code} {detail}"
            else:
                message = f"api request failed: {response.status_code} {response.text}"
            raise APIRequestError(
                message,
                status_code=response.status_code,
                detail=detail,
                body=body,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise APIUnavailableError(
                f"invalid response (not JSON): {response.status_code}"
            ) from exc

    def send(self, api_request: APIRequest) -> dict | None:
        return self.request(
            api_request.method,
            api_request.path,
            params=api_request.params,
            json_payload=api_request.json_payload,
        )

    def get_binary(self, binary_prn: str) -> dict:
        return self.request("GET", f"/binaries/{binary_prn}") or {}


__all__ = ["APIClient", "APIRequest", "sdk_version"]
