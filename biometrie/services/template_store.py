"""
Accès aux gabarits biométriques stockés
"""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from biometrie.models.biometric import BiometricTemplate, BiometricType


async def find_active_templates(
    db: AsyncSession,
    user_id: str,
    biometric_type: BiometricType
) -> List[BiometricTemplate]:
    """Gabarits actifs d'un utilisateur pour une modalité, dans l'ordre d'enrôlement"""
    result = await db.execute(
        select(BiometricTemplate)
        .where(
            BiometricTemplate.user_id == user_id,
            BiometricTemplate.type == biometric_type,
            BiometricTemplate.is_active.is_(True),
        )
        .order_by(BiometricTemplate.enrollment_date, BiometricTemplate.id)
    )
    return list(result.scalars().all())


async def has_active_template(db: AsyncSession, user_id: str, biometric_type: BiometricType) -> bool:
    """Vérifier s'il existe déjà un gabarit actif pour (utilisateur, modalité)"""
    result = await db.execute(
        select(BiometricTemplate.id)
        .where(
            BiometricTemplate.user_id == user_id,
            BiometricTemplate.type == biometric_type,
            BiometricTemplate.is_active.is_(True),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def insert_template(db: AsyncSession, template: BiometricTemplate) -> BiometricTemplate:
    """
    Insérer un gabarit
    L'index unique partiel (user_id, type) WHERE is_active lève IntegrityError
    si un gabarit actif a été inséré entre-temps.
    """
    db.add(template)
    await db.flush()
    return template


async def get_template(db: AsyncSession, template_id: str) -> Optional[BiometricTemplate]:
    """Récupérer un gabarit par ID"""
    result = await db.execute(select(BiometricTemplate).where(BiometricTemplate.id == template_id))
    return result.scalar_one_or_none()


async def list_templates(
    db: AsyncSession,
    user_id: str,
    biometric_type: Optional[BiometricType] = None
) -> List[BiometricTemplate]:
    """Tous les gabarits d'un utilisateur (actifs ou non), éventuellement filtrés par modalité"""
    query = select(BiometricTemplate).where(BiometricTemplate.user_id == user_id)
    if biometric_type is not None:
        query = query.where(BiometricTemplate.type == biometric_type)
    result = await db.execute(query.order_by(BiometricTemplate.enrollment_date, BiometricTemplate.id))
    return list(result.scalars().all())


async def count_active_templates(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count(BiometricTemplate.id)).where(
            BiometricTemplate.user_id == user_id,
            BiometricTemplate.is_active.is_(True),
        )
    )
    return result.scalar_one()


async def remove_template(db: AsyncSession, template: BiometricTemplate) -> None:
    """Suppression définitive"""
    await db.delete(template)
    await db.flush()
