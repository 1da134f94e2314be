"""
Modèle pour les gabarits biométriques
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, Boolean, Enum, JSON, Index, text
from datetime import datetime

from biometrie.database import Base
from biometrie.modalities import BiometricType


class BiometricTemplate(Base):
    """
    Stocke un gabarit dérivé d'un échantillon (jamais l'échantillon brut)
    - template: gabarit chiffré au format "<iv hex>:<chiffré hex>"
    - quality: score 0-100 dans la plage de la modalité
    """
    __tablename__ = "biometric_templates"
    __table_args__ = (
        # Un seul gabarit actif par (utilisateur, modalité): insertion conditionnelle
        Index(
            "uq_biometric_templates_active_user_type",
            "user_id",
            "type",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(128), index=True, nullable=False)
    type = Column(Enum(BiometricType), nullable=False)

    template = Column(Text, nullable=False)
    quality = Column(Integer, nullable=False)

    enrollment_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_used = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Contexte de capture (type/model/os), non utilisé pour la comparaison
    device_info = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<BiometricTemplate id={self.id} user_id={self.user_id} type={self.type.value}>"
