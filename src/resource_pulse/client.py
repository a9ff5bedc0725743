from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from resource_pulse.config import Config, cfg

_logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """A backend request failed: non-2xx status or transport error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"[{self.status_code}] {self.message}"


def _error_message(resp: httpx.Response) -> str:
    """Prefer the backend's {"message": ...} / {"detail": ...} body over the reason."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            if body.get(key):
                return str(body[key])
    return resp.reason_phrase


class ResourcePulseClient:
    """
    Thin synchronous wrapper over the resource-management REST API.

    One request per call, JSON in and out. Nothing is retried: any failure
    surfaces as ApiError and the caller decides what to render instead.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        config: Config = cfg,
        transport: Optional[httpx.BaseTransport] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else config.API_TIMEOUT_SEC,
            transport=transport,
            headers=headers,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ResourcePulseClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = self._client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            _logger.warning(
                "%s %s failed with %s: %s",
                method,
                path,
                exc.response.status_code,
                message,
            )
            raise ApiError(message, exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            _logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Request to {path} failed: {exc}") from exc

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON from {path}", resp.status_code) from exc

    # ----- skills -----
    def list_skills(self) -> list[dict[str, Any]]:
        return self._request("GET", "/skills") or []

    def gap_analysis(self, level: Optional[str] = None) -> Any:
        params = {"proficiencyLevel": level} if level and level != "All" else None
        return self._request("GET", "/skills/gap-analysis", params=params)

    def create_skill(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/skills", json=payload)

    def update_skill(self, skill_id: Any, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/skills/{skill_id}", json=payload)

    def delete_skill(self, skill_id: Any) -> None:
        self._request("DELETE", f"/skills/{skill_id}")

    # ----- resources / projects -----
    def list_resources(self) -> list[dict[str, Any]]:
        return self._request("GET", "/resources") or []

    def create_resource(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/resources", json=payload)

    def update_resource(
        self, resource_id: Any, payload: dict[str, Any]
    ) -> dict[str, Any]:
        return self._request("PUT", f"/resources/{resource_id}", json=payload)

    def delete_resource(self, resource_id: Any) -> None:
        self._request("DELETE", f"/resources/{resource_id}")

    def list_projects(self) -> list[dict[str, Any]]:
        return self._request("GET", "/projects") or []

    def create_project(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/projects", json=payload)

    def update_project(
        self, project_id: Any, payload: dict[str, Any]
    ) -> dict[str, Any]:
        return self._request("PUT", f"/projects/{project_id}", json=payload)

    def delete_project(self, project_id: Any) -> None:
        self._request("DELETE", f"/projects/{project_id}")

    # ----- allocations -----
    def update_allocation(
        self, resource_id: Any, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """Create or update one allocation of a resource; returns the allocation."""
        path = f"/allocations/resource/{resource_id}"
        return self._request("PUT", path, json=payload)

    def remove_allocation(self, resource_id: Any, allocation_id: Any) -> Any:
        return self._request(
            "POST",
            "/allocations/remove",
            json={"resourceId": resource_id, "allocationId": allocation_id},
        )

    def matches(self, project_id: Any = None) -> Any:
        params = {"projectId": project_id} if project_id is not None else None
        return self._request("GET", "/allocations/matches", params=params)

    def ending_soon(self, days: int = 14) -> list[dict[str, Any]]:
        return (
            self._request("GET", "/allocations/ending-soon", params={"days": int(days)})
            or []
        )
