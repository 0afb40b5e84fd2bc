"""Async client for the Grifo REST API, as used by the mobile app."""

from typing import Any

from grifo.client.fallback import ApiError, Backend, BackendChain


class GrifoClient:
    """CRUD helpers over ``BackendChain``; unwraps the response envelope."""

    def __init__(self, chain: BackendChain, token: str | None = None, *, prefix: str = "/api/v1"):
        self._chain = chain
        self._prefix = prefix
        self.token = token

    @classmethod
    def from_urls(cls, primary: str, secondary: str | None = None, **kwargs: Any) -> "GrifoClient":
        backends = [Backend("primary", primary)]
        if secondary:
            backends.append(Backend("secondary", secondary))
        token = kwargs.pop("token", None)
        return cls(BackendChain(backends, **kwargs), token)

    async def __aenter__(self) -> "GrifoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._chain.aclose()

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = await self._chain.request(method, f"{self._prefix}{path}", headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error or not body.get("success", False):
            raise ApiError(
                response.status_code,
                body.get("code", "HTTP_ERROR"),
                body.get("error", response.reason_phrase),
                body.get("details"),
            )
        return body.get("data")

    # --- auth ---

    async def login(self, email: str, password: str) -> dict:
        data = await self._call("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    async def me(self) -> dict:
        return (await self._call("GET", "/auth/me"))["user"]

    # --- properties ---

    async def list_properties(self, **params: Any) -> dict:
        return await self._call("GET", "/properties", params=params)

    async def get_property(self, property_id: str) -> dict:
        return (await self._call("GET", f"/properties/{property_id}"))["property"]

    async def create_property(self, fields: dict) -> dict:
        return (await self._call("POST", "/properties", json=fields))["property"]

    async def update_property(self, property_id: str, fields: dict) -> dict:
        return (await self._call("PUT", f"/properties/{property_id}", json=fields))["property"]

    async def delete_property(self, property_id: str) -> None:
        await self._call("DELETE", f"/properties/{property_id}")

    # --- inspections ---

    async def list_inspections(self, **params: Any) -> dict:
        return await self._call("GET", "/inspections", params=params)

    async def get_inspection(self, inspection_id: str) -> dict:
        return (await self._call("GET", f"/inspections/{inspection_id}"))["inspection"]

    async def create_inspection(self, fields: dict) -> dict:
        return (await self._call("POST", "/inspections", json=fields))["inspection"]

    async def update_inspection(self, inspection_id: str, fields: dict) -> dict:
        return (await self._call("PUT", f"/inspections/{inspection_id}", json=fields))["inspection"]

    # --- uploads ---

    async def upload_files(
        self,
        files: list[tuple[str, bytes, str]],
        upload_type: str,
        *,
        related_id: str | None = None,
        description: str | None = None,
    ) -> list[dict]:
        form = {"upload_type": upload_type}
        if related_id:
            form["related_id"] = related_id
        if description:
            form["description"] = description
        multipart = [("files", (name, content, mime)) for name, content, mime in files]
        return (await self._call("POST", "/uploads", data=form, files=multipart))["files"]

    # --- sync ---

    async def sync_status(self) -> dict:
        return await self._call("GET", "/sync/status")

    async def trigger_sync(self, sync_type: str = "incremental", entity_types: list[str] | None = None) -> dict:
        body: dict[str, Any] = {"sync_type": sync_type}
        if entity_types:
            body["entity_types"] = entity_types
        return await self._call("POST", "/sync/trigger", json=body)
