"""
Routes biométriques
L'identité du demandeur est fournie par la couche d'authentification amont (en-tête X-User-Id).
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from biometrie.database import get_db
from biometrie.exceptions import (
    BiometricError,
    DuplicateEnrollment,
    InvalidBiometricSample,
    NotFoundOrForbidden,
    UnsupportedModality,
)
from biometrie.schemas.biometric import (
    AuditEntryResponse,
    AuditTrailResponse,
    BiometricEnrollRequest,
    BiometricTemplateResponse,
    BiometricValidateRequest,
    TemplateStatusResponse,
    ValidationResult,
)
from biometrie.services.biometric_service import BiometricService, get_biometric_service

router = APIRouter(prefix="/biometrics", tags=["Biométrie"])


ERROR_STATUS = {
    DuplicateEnrollment: status.HTTP_409_CONFLICT,
    UnsupportedModality: status.HTTP_400_BAD_REQUEST,
    InvalidBiometricSample: status.HTTP_400_BAD_REQUEST,
    NotFoundOrForbidden: status.HTTP_404_NOT_FOUND,
}


def to_http_exception(error: BiometricError) -> HTTPException:
    """Traduire une erreur du service en réponse HTTP (500 par défaut)"""
    status_code = ERROR_STATUS.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=error.message)


async def get_requester_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Identifiant de l'utilisateur authentifié - en-tête absent ou vide: 401"""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Utilisateur non authentifié"
        )
    return x_user_id


@router.post("/enroll", response_model=BiometricTemplateResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    payload: BiometricEnrollRequest,
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    """Enrôler un gabarit pour l'utilisateur courant"""
    device_info = payload.device_info.model_dump(exclude_none=True) if payload.device_info else None
    try:
        return await service.enroll(db, user_id, payload.type, payload.biometric_data, device_info)
    except BiometricError as e:
        raise to_http_exception(e)


@router.post("/validate", response_model=ValidationResult, response_model_exclude_none=True)
async def validate(
    payload: BiometricValidateRequest,
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    """Valider un échantillon - un échec de correspondance reste une réponse 200"""
    device_info = payload.device_info.model_dump(exclude_none=True) if payload.device_info else None
    try:
        return await service.validate(
            db, user_id, payload.type, payload.biometric_data,
            device_info=device_info, location=payload.location
        )
    except BiometricError as e:
        raise to_http_exception(e)


@router.get("/templates", response_model=List[BiometricTemplateResponse])
async def list_templates(
    type: Optional[str] = Query(None),
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    """Gabarits de l'utilisateur courant"""
    try:
        return await service.list_templates(db, user_id, type)
    except BiometricError as e:
        raise to_http_exception(e)


@router.get("/status", response_model=TemplateStatusResponse)
async def template_status(
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    try:
        has_templates = await service.has_templates(db, user_id)
    except BiometricError as e:
        raise to_http_exception(e)
    return TemplateStatusResponse(user_id=user_id, has_templates=has_templates)


@router.post("/templates/{template_id}/deactivate", response_model=BiometricTemplateResponse)
async def deactivate_template(
    template_id: str,
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    """Désactiver un gabarit (conservé mais exclu de la comparaison)"""
    try:
        return await service.deactivate_template(db, template_id, user_id)
    except BiometricError as e:
        raise to_http_exception(e)


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: str,
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    """Supprimer définitivement un gabarit"""
    try:
        await service.delete_template(db, template_id, user_id)
    except BiometricError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/audit", response_model=AuditTrailResponse)
async def audit_trail(
    limit: int = Query(100, ge=1, le=1000),
    user_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db),
    service: BiometricService = Depends(get_biometric_service)
):
    """Journal d'audit de l'utilisateur courant"""
    try:
        entries = await service.get_audit_trail(db, user_id, limit)
    except BiometricError as e:
        raise to_http_exception(e)
    return AuditTrailResponse(entries=[AuditEntryResponse.model_validate(entry) for entry in entries])
