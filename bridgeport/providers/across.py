"""Async client for the Across bridge aggregator REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..config import settings
from ..core.catalog.models import Environment
from ..core.errors import (
    AggregatorError,
    CatalogFetchError,
    MalformedCatalogResponse,
    QuoteRequestError,
)

logger = logging.getLogger(__name__)


class AcrossProvider:
    """Thin wrapper around the Across ``/available-routes`` and ``/swap/approval`` endpoints."""

    def __init__(
        self,
        *,
        base_urls: Optional[Mapping[Environment, str]] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        configured = dict(base_urls or {})
        self.base_urls: Dict[Environment, str] = {
            Environment.MAINNET: configured.get(Environment.MAINNET, settings.across_mainnet_base_url).rstrip("/"),
            Environment.TESTNET: configured.get(Environment.TESTNET, settings.across_testnet_base_url).rstrip("/"),
        }
        self.timeout_s = timeout_s if timeout_s is not None else settings.request_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "BridgeportAcrossClient/2026-10",
        }

    async def _get(
        self,
        environment: Environment,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        error_cls: type[AggregatorError],
    ) -> httpx.Response:
        base_url = self.base_urls[environment]
        try:
            async with httpx.AsyncClient(
                base_url=base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=params, headers=self._headers())
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            detail = (exc.response.text or "").strip()[:200]
            logger.warning("Across %s failed (%s): %s", path, status_code, detail)
            raise error_cls(
                f"Across {path} failed ({status_code}) {detail}".rstrip(),
                status_code=status_code,
                details={"environment": environment.value},
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Across %s unreachable: %s", path, exc)
            raise error_cls(
                f"Across {path} request failed: {exc}",
                details={"environment": environment.value},
            ) from exc

    async def available_routes(self, environment: Environment) -> Any:
        """Fetch the raw route table. The envelope shape is not normalized here."""

        response = await self._get(environment, "/available-routes", error_cls=CatalogFetchError)
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedCatalogResponse(
                "Across available-routes: response is not JSON",
                details={"environment": environment.value},
            ) from exc

    async def swap_approval(
        self,
        environment: Environment,
        *,
        amount: str,
        input_token: str,
        output_token: str,
        origin_chain_id: int,
        destination_chain_id: int,
        depositor: str,
        recipient: Optional[str] = None,
        trade_type: str = "exactInput",
        slippage: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Request an execution payload (optional approval tx plus the swap/bridge tx).

        ``amount`` is in the input token's smallest unit, as a decimal string.
        """

        params: Dict[str, str] = {
            "tradeType": trade_type,
            "amount": amount,
            "inputToken": input_token,
            "outputToken": output_token,
            "originChainId": str(origin_chain_id),
            "destinationChainId": str(destination_chain_id),
            "depositor": depositor,
        }
        if recipient:
            params["recipient"] = recipient
        params["slippage"] = slippage or settings.swap_slippage

        response = await self._get(environment, "/swap/approval", params=params, error_cls=QuoteRequestError)
        try:
            body = response.json()
        except ValueError as exc:
            raise QuoteRequestError(
                "Across /swap/approval returned a non-JSON body",
                status_code=response.status_code,
            ) from exc
        if not isinstance(body, dict):
            raise QuoteRequestError(
                "Across /swap/approval returned an unexpected body",
                status_code=response.status_code,
            )
        return body
