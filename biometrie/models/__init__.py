# Modèles de données
# Importer tous les modèles pour que SQLAlchemy enregistre les tables

from biometrie.models.biometric import BiometricTemplate, BiometricType
from biometrie.models.audit_log import BiometricAuditLog, AuditAction

__all__ = [
    "BiometricTemplate",
    "BiometricType",
    "BiometricAuditLog",
    "AuditAction",
]
