"""Contract audit routes."""

import logging

from fastapi import APIRouter, HTTPException, status

from defyshield.api.deps import Auditor, ContractAddress
from defyshield.schemas.audit import AuditResponse, ErrorResponse, SourceAuditRequest
from defyshield.services.audit_service import AuditFailedError
from defyshield.services.contract_source_service import ContractSourceError

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.get("/{address}", response_model=AuditResponse, responses=ERROR_RESPONSES)
async def audit_contract(address: ContractAddress, auditor: Auditor):
    """Audit the verified source of a deployed contract."""
    logger.info(f"Audit requested for contract: {address}")
    try:
        return await auditor.audit_address(address)
    except ContractSourceError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except AuditFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc


@router.post("/source", response_model=AuditResponse, responses=ERROR_RESPONSES)
def audit_source(request: SourceAuditRequest, auditor: Auditor):
    """Audit posted Solidity source without touching the chain."""
    logger.info(f"Source audit requested for contract: {request.contract_address}")
    try:
        return auditor.audit_source(request.source, request.contract_address)
    except AuditFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
