"""
Journal d'audit biométrique
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from biometrie.models.audit_log import AuditAction, BiometricAuditLog


async def record_audit(
    db: AsyncSession,
    action: AuditAction,
    user_id: str,
    template_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> BiometricAuditLog:
    """Ajouter une entrée d'audit (le commit reste à la charge de l'appelant)"""
    entry = BiometricAuditLog(
        action=action,
        user_id=user_id,
        template_id=template_id,
        details=details or {},
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_audit_entries(db: AsyncSession, user_id: str, limit: int = 100) -> List[BiometricAuditLog]:
    """Entrées d'audit d'un utilisateur, les plus récentes d'abord"""
    result = await db.execute(
        select(BiometricAuditLog)
        .where(BiometricAuditLog.user_id == user_id)
        .order_by(BiometricAuditLog.timestamp.desc(), BiometricAuditLog.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
