"""
Configuration de la base de données (SQLite asynchrone par défaut)
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from biometrie.config import settings


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Créer un moteur asynchrone pour l'URL donnée.
    Une base SQLite en mémoire partage une connexion unique, sinon chaque
    connexion du pool verrait une base vide.
    """
    options = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    return create_async_engine(url, echo=echo, future=True, **options)


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Moteur de base de données asynchrone
engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
async_session_maker = create_session_maker(engine)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles"""
    pass


async def get_db():
    """Générateur de session de base de données"""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Créer les tables biometric_templates et biometric_audit_logs"""
    # Enregistre les modèles sur Base.metadata
    import biometrie.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
