"""Tests for explorer and RPC lookups."""

import json

import httpx
import pytest

from defyshield.config import Settings
from defyshield.services.contract_source_service import (
    ContractSourceError,
    ContractSourceService,
    NoContractError,
    flatten_source,
)

EXPLORER_URL = "https://explorer.test/api"
RPC_URL = "https://rpc.test"


def make_service(handler, **overrides) -> ContractSourceService:
    settings = Settings(explorer_api_url=EXPLORER_URL, rpc_url=RPC_URL, **overrides)
    return ContractSourceService(settings, transport=httpx.MockTransport(handler))


def explorer_payload(source_code: str, name: str = "Vault") -> dict:
    return {
        "status": "1",
        "message": "OK",
        "result": [
            {
                "SourceCode": source_code,
                "ContractName": name,
                "CompilerVersion": "v0.8.19+commit.7dd6d404",
            }
        ],
    }


class TestGetVerifiedSource:
    """Test explorer source lookups."""

    @pytest.mark.asyncio
    async def test_returns_source(self, contract_address):
        """Verified source is returned with metadata."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=explorer_payload("contract Vault {}"))

        service = make_service(handler)
        contract = await service.get_verified_source(contract_address)

        assert contract.source == "contract Vault {}"
        assert contract.contract_name == "Vault"
        assert contract.compiler_version.startswith("v0.8.19")
        params = requests[0].url.params
        assert params["module"] == "contract"
        assert params["action"] == "getsourcecode"
        assert params["address"] == contract_address
        assert "apikey" not in params

    @pytest.mark.asyncio
    async def test_sends_api_key(self, contract_address):
        """Configured API key is passed as a query parameter."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=explorer_payload("contract Vault {}"))

        service = make_service(handler, explorer_api_key="secret")
        await service.get_verified_source(contract_address)

        assert seen["apikey"] == "secret"

    @pytest.mark.asyncio
    async def test_unverified_contract(self, contract_address):
        """Empty SourceCode means the contract is not verified."""
        service = make_service(lambda request: httpx.Response(200, json=explorer_payload("", name="")))

        with pytest.raises(ContractSourceError, match="not verified"):
            await service.get_verified_source(contract_address)

    @pytest.mark.asyncio
    async def test_explorer_error_status(self, contract_address):
        """status != 1 is surfaced with the explorer's message."""
        payload = {"status": "0", "message": "NOTOK", "result": "Invalid API Key"}
        service = make_service(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(ContractSourceError, match="Invalid API Key"):
            await service.get_verified_source(contract_address)

    @pytest.mark.asyncio
    async def test_http_failure(self, contract_address):
        """HTTP errors become ContractSourceError."""
        service = make_service(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(ContractSourceError, match="Explorer request failed"):
            await service.get_verified_source(contract_address)

    @pytest.mark.asyncio
    async def test_invalid_json(self, contract_address):
        """A non-JSON body is an explorer failure."""
        service = make_service(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ContractSourceError):
            await service.get_verified_source(contract_address)


class TestGetBytecode:
    """Test eth_getCode lookups."""

    @pytest.mark.asyncio
    async def test_returns_bytecode(self, contract_address):
        """Deployed code is returned as hex."""
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x6080"})

        service = make_service(handler)
        bytecode = await service.get_bytecode(contract_address)

        assert bytecode == "0x6080"
        assert bodies[0]["method"] == "eth_getCode"
        assert bodies[0]["params"] == [contract_address, "latest"]

    @pytest.mark.asyncio
    async def test_no_contract(self, contract_address):
        """'0x' means nothing is deployed."""
        service = make_service(
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"})
        )

        with pytest.raises(NoContractError, match="No contract found"):
            await service.get_bytecode(contract_address)

    @pytest.mark.asyncio
    async def test_rpc_error(self, contract_address):
        """JSON-RPC errors are surfaced."""
        payload = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "invalid argument"}}
        service = make_service(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(ContractSourceError, match="invalid argument"):
            await service.get_bytecode(contract_address)


class TestFlattenSource:
    """Test multi-file source flattening."""

    def test_plain_source_unchanged(self):
        source = "pragma solidity ^0.8.0;\ncontract A {}"

        assert flatten_source(source) == source

    def test_standard_json_with_double_braces(self):
        """Standard JSON input is joined file by file."""
        standard = {
            "language": "Solidity",
            "sources": {
                "contracts/A.sol": {"content": "contract A {}"},
                "contracts/B.sol": {"content": "contract B {}"},
            },
        }
        wrapped = "{" + json.dumps(standard) + "}"

        flattened = flatten_source(wrapped)

        assert flattened == (
            "// File: contracts/A.sol\ncontract A {}\n\n"
            "// File: contracts/B.sol\ncontract B {}"
        )

    def test_bare_sources_map(self):
        """A bare path-to-content map is also accepted."""
        sources = {"Token.sol": {"content": "contract Token {}"}}

        assert flatten_source(json.dumps(sources)) == "// File: Token.sol\ncontract Token {}"

    def test_malformed_json_returned_as_is(self):
        source = "{ not json"

        assert flatten_source(source) == source
