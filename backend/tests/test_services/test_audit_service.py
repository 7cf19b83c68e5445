"""Tests for audit orchestration."""

from unittest.mock import AsyncMock

import pytest

from defyshield.config import Settings
from defyshield.services.audit_service import AuditFailedError, AuditService
from defyshield.services.cache_service import AuditCache
from defyshield.services.contract_source_service import (
    ContractSource,
    ContractSourceError,
    NoContractError,
)
from defyshield.services.scoring_service import AUDIT_DISCLAIMER, ScoringService


@pytest.fixture
def sources():
    return AsyncMock()


@pytest.fixture
def auditor(analyzer, sources):
    return AuditService(
        analyzer=analyzer,
        scoring=ScoringService(),
        sources=sources,
        cache=AuditCache(Settings()),
    )


class TestAuditAddress:
    """Test audits of deployed contracts."""

    @pytest.mark.asyncio
    async def test_audit_reentrancy_contract(self, auditor, sources, sample_reentrancy, contract_address):
        """Fetched source is analyzed and scored."""
        sources.get_verified_source.return_value = ContractSource(
            address=contract_address, source=sample_reentrancy, contract_name="ReentrancyVulnerable"
        )

        report = await auditor.audit_address(contract_address)

        assert report.contract_address == contract_address
        assert report.contract_name == "ReentrancyVulnerable"
        assert report.cached is False
        assert report.disclaimer == AUDIT_DISCLAIMER
        assert 0 <= report.score < 100
        assert any(issue.type == "reentrancy" for issue in report.issues)
        sources.get_verified_source.assert_awaited_once_with(contract_address)

    @pytest.mark.asyncio
    async def test_second_call_is_cached(self, auditor, sources, sample_logic, contract_address):
        """A repeated audit is served from cache without refetching."""
        sources.get_verified_source.return_value = ContractSource(
            address=contract_address, source=sample_logic
        )

        first = await auditor.audit_address(contract_address)
        second = await auditor.audit_address(contract_address.upper().replace("0X", "0x"))

        assert first.cached is False
        assert second.cached is True
        assert second.score == first.score
        assert sources.get_verified_source.await_count == 1
        assert auditor.cache.analysis.get(contract_address) is not None

    @pytest.mark.asyncio
    async def test_source_error_propagates(self, auditor, sources, contract_address):
        """Explorer failures are not cached and propagate."""
        sources.get_verified_source.side_effect = ContractSourceError("not verified")

        with pytest.raises(ContractSourceError):
            await auditor.audit_address(contract_address)

        assert auditor.cache.scores.get(contract_address) is None

    @pytest.mark.asyncio
    async def test_unparseable_source(self, auditor, sources, sample_invalid, contract_address):
        """Parse failures raise AuditFailedError with the analysis message."""
        sources.get_verified_source.return_value = ContractSource(
            address=contract_address, source=sample_invalid
        )

        with pytest.raises(AuditFailedError, match="Failed to analyze contract"):
            await auditor.audit_address(contract_address)

        assert auditor.cache.scores.get(contract_address) is None

    @pytest.mark.asyncio
    async def test_explorer_name_used_when_unknown(self, auditor, sources, contract_address):
        """Explorer name fills in when no contract is declared."""
        sources.get_verified_source.return_value = ContractSource(
            address=contract_address, source="pragma solidity ^0.8.0;", contract_name="Proxy"
        )

        report = await auditor.audit_address(contract_address)

        assert report.contract_name == "Proxy"
        assert report.score == 100

    @pytest.mark.asyncio
    async def test_no_contract_at_address(self, auditor, sources, contract_address):
        """An unverified address with no code is reported as empty."""
        sources.get_verified_source.side_effect = ContractSourceError("not verified")
        sources.get_bytecode.side_effect = NoContractError("No contract found")

        with pytest.raises(NoContractError, match="No contract found"):
            await auditor.audit_address(contract_address)

        sources.get_bytecode.assert_awaited_once_with(contract_address)

    @pytest.mark.asyncio
    async def test_bytecode_failure_keeps_source_error(self, auditor, sources, contract_address):
        """An RPC failure does not hide the explorer error."""
        sources.get_verified_source.side_effect = ContractSourceError("not verified")
        sources.get_bytecode.side_effect = ContractSourceError("RPC request failed")

        with pytest.raises(ContractSourceError, match="not verified"):
            await auditor.audit_address(contract_address)

    @pytest.mark.asyncio
    async def test_cached_analysis_is_rescored(self, auditor, sources, sample_logic, contract_address):
        """An expired report is rebuilt from the cached analysis."""
        sources.get_verified_source.return_value = ContractSource(
            address=contract_address, source=sample_logic
        )
        first = await auditor.audit_address(contract_address)
        auditor.cache.scores.clear()

        second = await auditor.audit_address(contract_address)

        assert second.cached is False
        assert second.score == first.score
        assert sources.get_verified_source.await_count == 1

    @pytest.mark.asyncio
    async def test_failed_analysis_not_refetched(self, auditor, sources, sample_invalid, contract_address):
        """A cached parse failure is reported again without refetching."""
        sources.get_verified_source.return_value = ContractSource(
            address=contract_address, source=sample_invalid
        )

        for _ in range(2):
            with pytest.raises(AuditFailedError):
                await auditor.audit_address(contract_address)

        assert sources.get_verified_source.await_count == 1


class TestAuditSource:
    """Test audits of posted source."""

    def test_audit_source(self, auditor, sample_access_control, contract_address):
        """Posted source gets a full report."""
        report = auditor.audit_source(sample_access_control, contract_address)

        assert report.contract_name == "AccessControlVulnerable"
        assert report.breakdown.issues_by_type == {"access_control": 1}
        assert report.breakdown.category_scores == {"access_control": -15}
        assert report.score == 85

    def test_audit_source_not_cached(self, auditor, sample_access_control, contract_address):
        auditor.audit_source(sample_access_control, contract_address)

        assert auditor.cache.scores.get(contract_address) is None

    def test_audit_source_invalid(self, auditor, sample_invalid, contract_address):
        with pytest.raises(AuditFailedError):
            auditor.audit_source(sample_invalid, contract_address)
