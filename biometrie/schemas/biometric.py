"""
Schémas Pydantic pour la biométrie
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from biometrie.models.audit_log import AuditAction
from biometrie.models.biometric import BiometricType


class DeviceInfo(BaseModel):
    """Contexte de capture, libre"""
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    model: Optional[str] = None
    os: Optional[str] = None


class BiometricEnrollRequest(BaseModel):
    """Requête d'enrôlement biométrique"""
    type: str
    biometric_data: str  # Échantillon brut (base64 ou data URL)
    device_info: Optional[DeviceInfo] = None


class BiometricValidateRequest(BaseModel):
    """Requête de validation biométrique"""
    type: str
    biometric_data: str
    device_info: Optional[DeviceInfo] = None
    location: Optional[Dict[str, Any]] = None


class BiometricTemplateResponse(BaseModel):
    """Gabarit renvoyé à l'appelant - sans le gabarit chiffré"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: BiometricType
    quality: int
    enrollment_date: datetime
    last_used: Optional[datetime] = None
    is_active: bool
    device_info: Optional[Dict[str, Any]] = None


class ValidationResult(BaseModel):
    """Résultat d'une validation, jamais persisté"""
    is_valid: bool
    confidence: float = Field(ge=0, le=100)
    matched_template_id: Optional[str] = None
    reason: Optional[str] = None
    processing_time: float  # millisecondes


class TemplateStatusResponse(BaseModel):
    """L'utilisateur a-t-il au moins un gabarit actif"""
    user_id: str
    has_templates: bool


class AuditEntryResponse(BaseModel):
    """Entrée du journal d'audit"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: AuditAction
    template_id: Optional[str] = None
    user_id: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime


class AuditTrailResponse(BaseModel):
    entries: List[AuditEntryResponse]
