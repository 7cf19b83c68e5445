"""API dependencies for dependency injection."""

import logging
import re
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Path, status

from defyshield.analyzers.static_analyzer import StaticAnalyzer
from defyshield.config import get_settings
from defyshield.schemas.audit import ADDRESS_PATTERN
from defyshield.services.audit_service import AuditService
from defyshield.services.cache_service import AuditCache
from defyshield.services.contract_source_service import ContractSourceService
from defyshield.services.scoring_service import ScoringService

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(ADDRESS_PATTERN)


def validate_contract_address(address: Annotated[str, Path()]) -> str:
    """Reject anything that is not ``0x`` followed by 40 hex characters."""
    if not ADDRESS_RE.match(address):
        logger.warning(f"Invalid address format: {address}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid contract address format",
        )
    return address


@lru_cache
def get_audit_service() -> AuditService:
    """Process-wide audit service; analyses share only immutable state."""
    settings = get_settings()
    return AuditService(
        analyzer=StaticAnalyzer(),
        scoring=ScoringService(settings.scoring_weights()),
        sources=ContractSourceService(settings),
        cache=AuditCache(settings),
    )


# Type aliases for cleaner signatures
ContractAddress = Annotated[str, Depends(validate_contract_address)]
Auditor = Annotated[AuditService, Depends(get_audit_service)]
