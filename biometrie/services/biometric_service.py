"""
Service biométrique: enrôlement, validation et gestion des gabarits
"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import uuid4
import logging
import time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from biometrie.config import BiometricConfig, settings
from biometrie.exceptions import (
    BiometricInternalError,
    DuplicateEnrollment,
    InvalidBiometricSample,
    NotFoundOrForbidden,
    UnsupportedModality,
)
from biometrie.models.audit_log import AuditAction, BiometricAuditLog
from biometrie.models.biometric import BiometricTemplate, BiometricType
from biometrie.schemas.biometric import ValidationResult
from biometrie.services import audit_service, template_store
from biometrie.services.encryption_service import TemplateCipher
from biometrie.services.matching_service import MatchingEngine
from biometrie.services.modality_service import (
    ModalityProcessor,
    RawSample,
    default_processors,
    get_processor,
    parse_biometric_type,
)

logger = logging.getLogger(__name__)

NO_TEMPLATES_REASON = "No biometric templates found for user"
VALIDATION_FAILED_REASON = "Biometric validation failed"
BELOW_THRESHOLD_REASON = "Confidence below threshold"
INTERNAL_VALIDATION_ERROR = "Internal server error during validation"
INTERNAL_ENROLLMENT_ERROR = "Internal server error during enrollment"
INTERNAL_ERROR = "Internal server error"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


class BiometricService:
    """
    Orchestration enrôlement / validation / suppression

    Le service ne garde aucun état mutable: chaque appel relit le stockage
    via la session fournie. Le chiffreur et le moteur de comparaison sont
    purs et partagés entre les requêtes.
    """

    def __init__(
        self,
        config: BiometricConfig,
        cipher: Optional[TemplateCipher] = None,
        matcher: Optional[MatchingEngine] = None,
        processors: Optional[Dict[BiometricType, ModalityProcessor]] = None
    ):
        self.config = config
        self.cipher = cipher or TemplateCipher(config.encryption_key.get_secret_value())
        self.matcher = matcher or MatchingEngine()
        self.processors = processors if processors is not None else default_processors()

    # ------------------------------------------------------------------
    # Enrôlement
    # ------------------------------------------------------------------

    async def enroll(
        self,
        db: AsyncSession,
        user_id: str,
        biometric_type: str,
        raw_sample: RawSample,
        device_info: Optional[Dict[str, Any]] = None
    ) -> BiometricTemplate:
        """
        Enrôler un gabarit pour (utilisateur, modalité)

        Raises:
            DuplicateEnrollment: un gabarit actif existe déjà
            UnsupportedModality, InvalidBiometricSample: requête invalide
            BiometricInternalError: toute autre erreur (cause journalisée)
        """
        type_label = getattr(biometric_type, "value", str(biometric_type))
        try:
            modality = parse_biometric_type(biometric_type)
            template = await self._create_template(db, user_id, modality, raw_sample, device_info)
        except (DuplicateEnrollment, UnsupportedModality, InvalidBiometricSample) as e:
            logger.warning(f"Enrôlement refusé pour user_id={user_id} ({type_label}): {e.message}")
            await db.rollback()
            await self._record_failure(
                db, AuditAction.ENROLLMENT, user_id,
                {"type": type_label, "success": False, "reason": e.message}
            )
            raise
        except Exception as e:
            logger.exception(f"Erreur lors de l'enrôlement pour user_id={user_id} ({type_label}): {e}")
            await db.rollback()
            await self._record_failure(
                db, AuditAction.ENROLLMENT, user_id,
                {"type": type_label, "success": False, "reason": INTERNAL_ENROLLMENT_ERROR}
            )
            raise BiometricInternalError(INTERNAL_ENROLLMENT_ERROR) from e

        logger.info(f"Gabarit {modality.value} enrôlé pour user_id={user_id} (qualité: {template.quality})")
        return template

    async def _create_template(
        self,
        db: AsyncSession,
        user_id: str,
        modality: BiometricType,
        raw_sample: RawSample,
        device_info: Optional[Dict[str, Any]]
    ) -> BiometricTemplate:
        if await template_store.has_active_template(db, user_id, modality):
            raise DuplicateEnrollment(user_id, modality.value)

        processed = get_processor(modality, self.processors).process(raw_sample)
        encrypted = self.cipher.encrypt(processed.template)

        template = BiometricTemplate(
            id=str(uuid4()),
            user_id=user_id,
            type=modality,
            template=encrypted,
            quality=processed.quality,
            enrollment_date=datetime.utcnow(),
            is_active=True,
            device_info=device_info,
        )
        try:
            await template_store.insert_template(db, template)
        except IntegrityError:
            # Un enrôlement concurrent a gagné la course
            raise DuplicateEnrollment(user_id, modality.value) from None

        await audit_service.record_audit(
            db, AuditAction.ENROLLMENT, user_id, template.id,
            {"type": modality.value, "quality": processed.quality, "success": True}
        )
        await db.commit()
        return template

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate(
        self,
        db: AsyncSession,
        user_id: str,
        biometric_type: str,
        raw_sample: RawSample,
        device_info: Optional[Dict[str, Any]] = None,
        location: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        """
        Valider un échantillon contre les gabarits actifs de l'utilisateur

        Les issues négatives attendues (aucun gabarit, confiance insuffisante)
        sont renvoyées comme résultat is_valid=False, jamais comme exception.

        Raises:
            UnsupportedModality: modalité inconnue
        """
        started = time.perf_counter()
        try:
            modality = parse_biometric_type(biometric_type)
        except UnsupportedModality as e:
            await self._record_failure(
                db, AuditAction.VALIDATION_FAILED, user_id,
                {"type": str(biometric_type), "confidence": 0, "reason": e.message}
            )
            raise

        try:
            return await self._match(db, user_id, modality, raw_sample, device_info, location, started)
        except UnsupportedModality as e:
            # Modalité valide mais sans processeur enregistré: même traitement qu'à l'enrôlement
            logger.warning(f"Validation refusée pour user_id={user_id}: {e.message}")
            await db.rollback()
            await self._record_failure(
                db, AuditAction.VALIDATION_FAILED, user_id,
                {"type": modality.value, "confidence": 0, "reason": e.message}
            )
            raise
        except Exception as e:
            logger.exception(f"Erreur lors de la validation pour user_id={user_id} ({modality.value}): {e}")
            await db.rollback()
            await self._record_failure(
                db, AuditAction.VALIDATION_FAILED, user_id,
                {"type": modality.value, "confidence": 0, "reason": INTERNAL_VALIDATION_ERROR}
            )
            return ValidationResult(
                is_valid=False,
                confidence=0,
                reason=INTERNAL_VALIDATION_ERROR,
                processing_time=_elapsed_ms(started),
            )

    async def _match(
        self,
        db: AsyncSession,
        user_id: str,
        modality: BiometricType,
        raw_sample: RawSample,
        device_info: Optional[Dict[str, Any]],
        location: Optional[Dict[str, Any]],
        started: float
    ) -> ValidationResult:
        context = {"type": modality.value}
        if device_info:
            context["device_info"] = device_info
        if location:
            context["location"] = location

        templates = await template_store.find_active_templates(db, user_id, modality)
        if not templates:
            logger.info(f"Aucun gabarit {modality.value} actif pour user_id={user_id}")
            return await self._reject(db, user_id, 0.0, NO_TEMPLATES_REASON, NO_TEMPLATES_REASON, context, started)

        try:
            candidate = get_processor(modality, self.processors).process(raw_sample)
        except InvalidBiometricSample as e:
            return await self._reject(db, user_id, 0.0, e.message, e.message, context, started)
        logger.debug(f"Qualité de l'échantillon candidat: {candidate.quality}")

        # Repli ordonné: en cas d'égalité, le premier gabarit rencontré est conservé
        best_template: Optional[BiometricTemplate] = None
        best_confidence = 0.0
        for stored in templates:
            decrypted = self.cipher.decrypt(stored.template)
            confidence = self.matcher.score(candidate.template, decrypted, modality)
            if best_template is None or confidence > best_confidence:
                best_template, best_confidence = stored, confidence

        threshold = self.config.threshold_for(modality)
        logger.info(
            f"Validation {modality.value} user_id={user_id}: "
            f"confiance {best_confidence:.2f} (seuil: {threshold})"
        )

        if best_template is None or best_confidence < threshold:
            return await self._reject(
                db, user_id, best_confidence, VALIDATION_FAILED_REASON,
                BELOW_THRESHOLD_REASON, {**context, "threshold": threshold}, started
            )

        best_template.last_used = datetime.utcnow()
        await audit_service.record_audit(
            db, AuditAction.VALIDATION_SUCCESS, user_id, best_template.id,
            {**context, "confidence": best_confidence}
        )
        await db.commit()

        return ValidationResult(
            is_valid=True,
            confidence=best_confidence,
            matched_template_id=best_template.id,
            processing_time=_elapsed_ms(started),
        )

    async def _reject(
        self,
        db: AsyncSession,
        user_id: str,
        confidence: float,
        reason: str,
        audit_reason: str,
        context: Dict[str, Any],
        started: float
    ) -> ValidationResult:
        await audit_service.record_audit(
            db, AuditAction.VALIDATION_FAILED, user_id, None,
            {**context, "confidence": confidence, "reason": audit_reason}
        )
        await db.commit()
        return ValidationResult(
            is_valid=False,
            confidence=confidence,
            reason=reason,
            processing_time=_elapsed_ms(started),
        )

    # ------------------------------------------------------------------
    # Gestion des gabarits
    # ------------------------------------------------------------------

    async def delete_template(self, db: AsyncSession, template_id: str, requester_id: str) -> None:
        """
        Supprimer définitivement un gabarit appartenant au demandeur

        Raises:
            NotFoundOrForbidden: gabarit absent ou appartenant à un autre utilisateur
        """
        template = await self._get_owned_template(db, template_id, requester_id)
        try:
            biometric_type = template.type.value
            await template_store.remove_template(db, template)
            await audit_service.record_audit(
                db, AuditAction.DELETION, requester_id, template_id, {"type": biometric_type}
            )
            await db.commit()
        except Exception as e:
            logger.exception(f"Erreur lors de la suppression du gabarit {template_id}: {e}")
            await db.rollback()
            raise BiometricInternalError(INTERNAL_ERROR) from e

        logger.info(f"Gabarit {template_id} supprimé par user_id={requester_id}")

    async def deactivate_template(
        self,
        db: AsyncSession,
        template_id: str,
        requester_id: str
    ) -> BiometricTemplate:
        """
        Désactiver un gabarit sans le supprimer
        Le gabarit reste consultable mais n'est plus utilisé pour la comparaison.
        """
        template = await self._get_owned_template(db, template_id, requester_id)
        try:
            template.is_active = False
            await audit_service.record_audit(
                db, AuditAction.DEACTIVATION, requester_id, template_id, {"type": template.type.value}
            )
            await db.commit()
        except Exception as e:
            logger.exception(f"Erreur lors de la désactivation du gabarit {template_id}: {e}")
            await db.rollback()
            raise BiometricInternalError(INTERNAL_ERROR) from e

        logger.info(f"Gabarit {template_id} désactivé par user_id={requester_id}")
        return template

    async def _get_owned_template(
        self,
        db: AsyncSession,
        template_id: str,
        requester_id: str
    ) -> BiometricTemplate:
        try:
            template = await template_store.get_template(db, template_id)
        except Exception as e:
            logger.exception(f"Erreur lors de la lecture du gabarit {template_id}: {e}")
            raise BiometricInternalError(INTERNAL_ERROR) from e

        # Absent et non possédé donnent le même message
        if template is None or template.user_id != requester_id:
            logger.warning(f"Accès refusé au gabarit {template_id} pour user_id={requester_id}")
            raise NotFoundOrForbidden()
        return template

    async def list_templates(
        self,
        db: AsyncSession,
        user_id: str,
        biometric_type: Optional[str] = None
    ) -> List[BiometricTemplate]:
        """Lister les gabarits d'un utilisateur"""
        modality = parse_biometric_type(biometric_type) if biometric_type is not None else None
        try:
            return await template_store.list_templates(db, user_id, modality)
        except Exception as e:
            logger.exception(f"Erreur lors de la liste des gabarits de user_id={user_id}: {e}")
            raise BiometricInternalError(INTERNAL_ERROR) from e

    async def has_templates(self, db: AsyncSession, user_id: str) -> bool:
        """L'utilisateur a-t-il au moins un gabarit actif"""
        try:
            return await template_store.count_active_templates(db, user_id) > 0
        except Exception as e:
            logger.exception(f"Erreur lors du comptage des gabarits de user_id={user_id}: {e}")
            raise BiometricInternalError(INTERNAL_ERROR) from e

    async def get_audit_trail(self, db: AsyncSession, user_id: str, limit: int = 100) -> List[BiometricAuditLog]:
        try:
            return await audit_service.list_audit_entries(db, user_id, limit)
        except Exception as e:
            logger.exception(f"Erreur lors de la lecture de l'audit de user_id={user_id}: {e}")
            raise BiometricInternalError(INTERNAL_ERROR) from e

    async def _record_failure(
        self,
        db: AsyncSession,
        action: AuditAction,
        user_id: str,
        details: Dict[str, Any]
    ) -> None:
        """Journaliser un échec sans masquer l'erreur d'origine si l'audit échoue aussi"""
        try:
            await audit_service.record_audit(db, action, user_id, None, details)
            await db.commit()
        except Exception as e:
            logger.exception(f"Impossible d'écrire l'entrée d'audit {action.value} pour user_id={user_id}: {e}")
            await db.rollback()


# Instance globale - initialisée au premier appel avec la configuration
biometric_service: Optional[BiometricService] = None


def get_biometric_service() -> BiometricService:
    """
    Retourne l'instance du service biométrique
    Lazy initialization: la dérivation de clé n'a lieu qu'une fois
    """
    global biometric_service

    if biometric_service is None:
        biometric_service = BiometricService(BiometricConfig.from_settings(settings))

    return biometric_service
