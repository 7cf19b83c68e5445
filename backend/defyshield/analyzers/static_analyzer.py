"""Static analysis entry point: parse, detect, assemble.

Callers are expected to have validated ``contract_address`` already (the API
layer rejects malformed addresses before analysis).
"""

import logging
from typing import Optional, Sequence

from defyshield.analyzers.base import AnalysisResult, Detector
from defyshield.analyzers.pipeline import DEFAULT_DETECTORS, run_detectors
from defyshield.parsers.solidity_ast import SourceUnit
from defyshield.parsers.solidity_parser import SolidityParseError, SolidityParser

logger = logging.getLogger(__name__)

UNKNOWN_CONTRACT = "Unknown"


class StaticAnalyzer:
    """Runs the detector pipeline over parsed Solidity source."""

    def __init__(
        self,
        parser: Optional[SolidityParser] = None,
        detectors: Sequence[type[Detector]] = DEFAULT_DETECTORS,
    ):
        self.parser = parser or SolidityParser()
        self.detectors = tuple(detectors)

    def analyze(self, source: str, contract_address: str) -> AnalysisResult:
        """Analyze contract source. Never raises; parse failures are reported
        through ``success=False`` and ``error_message``.
        """
        try:
            ast = self.parser.parse(source)
        except (SolidityParseError, UnicodeError, RecursionError) as e:
            logger.error(f"Error analyzing contract {contract_address}: {e}")
            return AnalysisResult.failed(contract_address, f"Failed to analyze contract: {e}")

        return self.assemble(contract_address, ast)

    def assemble(self, contract_address: str, ast: SourceUnit) -> AnalysisResult:
        contract_name = UNKNOWN_CONTRACT
        for contract in ast.contracts:
            if contract.name:
                contract_name = contract.name
                break

        issues = run_detectors(ast, self.detectors)
        logger.info(f"Analysis completed for {contract_address}: {len(issues)} issues found")

        return AnalysisResult(
            contract_address=contract_address,
            contract_name=contract_name,
            issues=issues,
            success=True,
        )
