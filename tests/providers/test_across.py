"""
Tests for the Across REST client, served through httpx.MockTransport.
"""

import json

import httpx
import pytest

from bridgeport.core.catalog import Environment
from bridgeport.core.errors import CatalogFetchError, MalformedCatalogResponse, QuoteRequestError
from bridgeport.providers.across import AcrossProvider

from conftest import BASE_SEPOLIA, DEPOSITOR, RECIPIENT, SEPOLIA, USDC_BASE_SEPOLIA, USDC_SEPOLIA, route_records


def _provider(handler) -> AcrossProvider:
    return AcrossProvider(
        base_urls={
            Environment.MAINNET: "https://app.example/api",
            Environment.TESTNET: "https://testnet.example/api/",
        },
        transport=httpx.MockTransport(handler),
    )


class TestAvailableRoutes:

    @pytest.mark.asyncio
    async def test_uses_environment_base_url(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=route_records())

        payload = await _provider(handler).available_routes(Environment.TESTNET)

        assert seen == ["https://testnet.example/api/available-routes"]
        assert payload == route_records()

    @pytest.mark.asyncio
    async def test_http_error_becomes_catalog_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="upstream unavailable")

        with pytest.raises(CatalogFetchError) as exc_info:
            await _provider(handler).available_routes(Environment.MAINNET)

        assert exc_info.value.status_code == 503
        assert "upstream unavailable" in exc_info.value.message
        assert exc_info.value.details["environment"] == "mainnet"

    @pytest.mark.asyncio
    async def test_network_error_becomes_catalog_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CatalogFetchError) as exc_info:
            await _provider(handler).available_routes(Environment.TESTNET)

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(MalformedCatalogResponse):
            await _provider(handler).available_routes(Environment.TESTNET)


class TestSwapApproval:

    @pytest.mark.asyncio
    async def test_query_parameters(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["params"] = dict(request.url.params)
            return httpx.Response(200, json={"swapTx": {"to": "0x1", "data": "0x2"}})

        body = await _provider(handler).swap_approval(
            Environment.TESTNET,
            amount="1500000",
            input_token=USDC_BASE_SEPOLIA,
            output_token=USDC_SEPOLIA,
            origin_chain_id=BASE_SEPOLIA,
            destination_chain_id=SEPOLIA,
            depositor=DEPOSITOR,
            recipient=RECIPIENT,
            slippage="0.01",
        )

        assert body == {"swapTx": {"to": "0x1", "data": "0x2"}}
        assert captured["path"] == "/api/swap/approval"
        assert captured["params"] == {
            "tradeType": "exactInput",
            "amount": "1500000",
            "inputToken": USDC_BASE_SEPOLIA,
            "outputToken": USDC_SEPOLIA,
            "originChainId": str(BASE_SEPOLIA),
            "destinationChainId": str(SEPOLIA),
            "depositor": DEPOSITOR,
            "recipient": RECIPIENT,
            "slippage": "0.01",
        }

    @pytest.mark.asyncio
    async def test_recipient_omitted_and_default_slippage(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(dict(request.url.params))
            return httpx.Response(200, content=json.dumps({}).encode())

        await _provider(handler).swap_approval(
            Environment.MAINNET,
            amount="1",
            input_token="0xa",
            output_token="0xb",
            origin_chain_id=1,
            destination_chain_id=10,
            depositor=DEPOSITOR,
        )

        assert "recipient" not in captured
        assert captured["slippage"] == "auto"

    @pytest.mark.asyncio
    async def test_http_error_becomes_quote_request_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Amount too low"})

        with pytest.raises(QuoteRequestError) as exc_info:
            await _provider(handler).swap_approval(
                Environment.TESTNET,
                amount="1",
                input_token="0xa",
                output_token="0xb",
                origin_chain_id=1,
                destination_chain_id=10,
                depositor=DEPOSITOR,
            )

        assert exc_info.value.status_code == 400
        assert "Amount too low" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_object_body_is_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[1, 2, 3])

        with pytest.raises(QuoteRequestError):
            await _provider(handler).swap_approval(
                Environment.TESTNET,
                amount="1",
                input_token="0xa",
                output_token="0xb",
                origin_chain_id=1,
                destination_chain_id=10,
                depositor=DEPOSITOR,
            )
