"""Mobile data-access layer: backend fallback and envelope unwrapping."""

import httpx
import pytest

from grifo.client import ApiError, Backend, BackendChain, BackendUnavailable, GrifoClient

BACKENDS = [Backend("primary", "http://primary.test"), Backend("secondary", "http://secondary.test")]


def _chain(handler) -> BackendChain:
    return BackendChain(BACKENDS, transport=httpx.MockTransport(handler))


async def test_primary_5xx_falls_back_to_secondary():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        if request.url.host == "primary.test":
            return httpx.Response(503)
        return httpx.Response(200, json={"success": True, "data": {"ok": 1}})

    chain = _chain(handler)
    response = await chain.request("GET", "/api/v1/health")
    await chain.aclose()

    assert response.status_code == 200
    assert seen == ["primary.test", "secondary.test"]


async def test_transport_error_falls_back():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "primary.test":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"success": True})

    chain = _chain(handler)
    response = await chain.request("GET", "/x")
    await chain.aclose()

    assert response.status_code == 200


async def test_client_error_is_final():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        return httpx.Response(404, json={"success": False, "error": "Propriedade não encontrado(a)", "code": "NOT_FOUND"})

    chain = _chain(handler)
    response = await chain.request("GET", "/x")
    await chain.aclose()

    assert response.status_code == 404
    assert seen == ["primary.test"]


async def test_all_backends_down():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    chain = _chain(handler)
    with pytest.raises(BackendUnavailable) as exc_info:
        await chain.request("GET", "/x")
    await chain.aclose()

    assert [name for name, _ in exc_info.value.attempts] == ["primary", "secondary"]


async def test_error_envelope_raises_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"success": False, "error": "Dados de entrada inválidos", "code": "VALIDATION_ERROR",
                  "details": [{"field": "zip_code", "message": "invalid"}]},
        )

    async with GrifoClient(_chain(handler), token="t") as client:
        with pytest.raises(ApiError) as exc_info:
            await client.create_property({"address": "x"})

    assert exc_info.value.status_code == 400
    assert exc_info.value.code == "VALIDATION_ERROR"
    assert exc_info.value.details[0]["field"] == "zip_code"


async def test_sends_bearer_token():
    headers = {}

    def handler(request: httpx.Request) -> httpx.Response:
        headers.update(request.headers)
        return httpx.Response(200, json={"success": True, "data": {"user": {"id": "u-1"}}})

    async with GrifoClient(_chain(handler), token="abc") as client:
        me = await client.me()

    assert me == {"id": "u-1"}
    assert headers["authorization"] == "Bearer abc"
