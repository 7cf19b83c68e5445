"""Audit orchestration: fetch source, analyze, score, cache."""

import logging
from dataclasses import replace

from defyshield.analyzers.base import AnalysisResult
from defyshield.analyzers.static_analyzer import UNKNOWN_CONTRACT, StaticAnalyzer
from defyshield.schemas.audit import AuditResponse
from defyshield.services.cache_service import AuditCache
from defyshield.services.contract_source_service import (
    ContractSourceError,
    ContractSourceService,
    NoContractError,
)
from defyshield.services.scoring_service import ScoringService

logger = logging.getLogger(__name__)


class AuditFailedError(Exception):
    """The contract source could not be analyzed."""


class AuditService:
    """Service for producing audit reports."""

    def __init__(
        self,
        analyzer: StaticAnalyzer,
        scoring: ScoringService,
        sources: ContractSourceService,
        cache: AuditCache,
    ):
        self.analyzer = analyzer
        self.scoring = scoring
        self.sources = sources
        self.cache = cache

    async def audit_address(self, address: str) -> AuditResponse:
        """Audit the verified source deployed at ``address``.

        Cached reports are returned with ``cached=True`` until they expire.
        A cached analysis (including a failed one) is rescored without
        fetching the source again.

        Raises:
            NoContractError: nothing is deployed at the address
            ContractSourceError: source could not be fetched
            AuditFailedError: source could not be parsed
        """
        cached = self.cache.scores.get(address)
        if cached is not None:
            return cached.model_copy(update={"cached": True})

        analysis = self.cache.analysis.get(address)
        if analysis is None:
            analysis = await self._analyze_deployed(address)
            self.cache.analysis.set(address, analysis)

        report = self._report(analysis)
        self.cache.scores.set(address, report)
        return report

    async def _analyze_deployed(self, address: str) -> AnalysisResult:
        try:
            contract = await self.sources.get_verified_source(address)
        except ContractSourceError:
            if not await self._has_code(address):
                raise NoContractError(f"No contract found at address {address}")
            raise

        analysis = self.analyzer.analyze(contract.source, address)
        if analysis.contract_name == UNKNOWN_CONTRACT and contract.contract_name:
            analysis = replace(analysis, contract_name=contract.contract_name)
        return analysis

    async def _has_code(self, address: str) -> bool:
        """False only when the chain confirms nothing is deployed."""
        try:
            await self.sources.get_bytecode(address)
        except NoContractError:
            return False
        except ContractSourceError as e:
            logger.warning(f"Bytecode lookup failed for {address}: {e}")
        return True

    def audit_source(self, source: str, address: str) -> AuditResponse:
        """Audit posted source. Results are not cached.

        Raises:
            AuditFailedError: source could not be parsed
        """
        analysis = self.analyzer.analyze(source, address)
        return self._report(analysis)

    def _report(self, analysis: AnalysisResult) -> AuditResponse:
        if not analysis.success:
            raise AuditFailedError(analysis.error_message or "Failed to analyze contract")

        score = self.scoring.score(analysis.contract_address, analysis.issues)
        logger.info(
            f"Audit report for {analysis.contract_address}: score {score.overall_score}, "
            f"{len(score.issues)} issues"
        )
        return AuditResponse.from_results(score, analysis.contract_name)
