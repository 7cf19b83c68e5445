"""Fetches contract source and bytecode from the chain and its block explorer."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from defyshield.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ContractSourceError(Exception):
    """Source or bytecode could not be obtained for an address."""


class NoContractError(ContractSourceError):
    """Nothing is deployed at the address."""


@dataclass
class ContractSource:
    """Verified source returned by the explorer."""

    address: str
    source: str
    contract_name: Optional[str] = None
    compiler_version: Optional[str] = None


class ContractSourceService:
    """Service for explorer (Etherscan/Blockscout style) and JSON-RPC lookups."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            transport=self._transport,
        )

    async def get_verified_source(self, address: str) -> ContractSource:
        """Get verified Solidity source for a contract.

        Args:
            address: Contract address (already validated)

        Returns:
            ContractSource with the flattened source text

        Raises:
            ContractSourceError: explorer failure or contract not verified
        """
        params = {"module": "contract", "action": "getsourcecode", "address": address}
        if self.settings.explorer_api_key:
            params["apikey"] = self.settings.explorer_api_key

        try:
            async with self._client() as client:
                response = await client.get(self.settings.explorer_api_url, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Explorer request failed for {address}: {e}")
            raise ContractSourceError(f"Explorer request failed: {e}") from e

        result = data.get("result")
        if data.get("status") != "1" or not isinstance(result, list) or not result:
            message = result if isinstance(result, str) else data.get("message", "unknown error")
            raise ContractSourceError(f"Explorer error for {address}: {message}")

        entry = result[0]
        source = flatten_source(entry.get("SourceCode") or "")
        if not source.strip():
            raise ContractSourceError(f"Contract {address} is not verified")

        logger.info(f"Fetched verified source for {address}")
        return ContractSource(
            address=address,
            source=source,
            contract_name=entry.get("ContractName") or None,
            compiler_version=entry.get("CompilerVersion") or None,
        )

    async def get_bytecode(self, address: str) -> str:
        """Get deployed bytecode through ``eth_getCode``.

        Raises:
            ContractSourceError: RPC failure or no contract at the address
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_getCode",
            "params": [address, "latest"],
        }
        try:
            async with self._client() as client:
                response = await client.post(self.settings.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to get bytecode for {address}: {e}")
            raise ContractSourceError(f"RPC request failed: {e}") from e

        if "error" in data:
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ContractSourceError(f"RPC error for {address}: {message}")

        bytecode = data.get("result") or "0x"
        if bytecode == "0x":
            raise NoContractError(f"No contract found at address {address}")
        return bytecode


def flatten_source(source_code: str) -> str:
    """Turn an explorer ``SourceCode`` field into plain Solidity text.

    Multi-file submissions come as standard JSON input, wrapped in an extra pair
    of braces (``{{...}}``) or as a bare ``{"File.sol": {"content": ...}}`` map.
    """
    text = source_code.strip()
    if not text.startswith("{"):
        return source_code

    candidate = text[1:-1] if text.startswith("{{") and text.endswith("}}") else text
    try:
        parsed: Any = json.loads(candidate)
    except ValueError:
        return source_code

    sources = parsed.get("sources", parsed) if isinstance(parsed, dict) else None
    if not isinstance(sources, dict):
        return source_code

    parts = []
    for path, body in sources.items():
        if isinstance(body, dict) and isinstance(body.get("content"), str):
            parts.append(f"// File: {path}\n{body['content']}")
    return "\n\n".join(parts) if parts else source_code
