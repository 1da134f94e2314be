"""
Modèle pour le journal d'audit biométrique (ajout seul)
"""
from sqlalchemy import Column, Integer, String, DateTime, Enum, JSON
from datetime import datetime
import enum

from biometrie.database import Base


class AuditAction(str, enum.Enum):
    """Actions journalisées"""
    ENROLLMENT = "enrollment"
    VALIDATION_SUCCESS = "validation_success"
    VALIDATION_FAILED = "validation_failed"
    DELETION = "deletion"
    DEACTIVATION = "deactivation"


class BiometricAuditLog(Base):
    """Entrée d'audit - aucune mise à jour ni suppression n'est exposée"""
    __tablename__ = "biometric_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(Enum(AuditAction), nullable=False)
    template_id = Column(String(36), nullable=True)
    user_id = Column(String(128), index=True, nullable=False)
    details = Column(JSON, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<BiometricAuditLog {self.action.value} user_id={self.user_id}>"
