"""
Fixtures partagées: base SQLite en mémoire et service configuré pour les tests
"""
import os

# Doit précéder tout import de biometrie: la configuration exige une clé
os.environ.setdefault("BIOMETRIC_ENCRYPTION_KEY", "cle-de-test-biometrie-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import func, select

from biometrie.config import BiometricConfig
from biometrie.database import Base, create_engine, create_session_maker
from biometrie.models import AuditAction, BiometricAuditLog
from biometrie.services.biometric_service import BiometricService
from biometrie.services.encryption_service import TemplateCipher

TEST_ENCRYPTION_KEY = "cle-de-test-biometrie-0123456789"


@pytest.fixture(scope="session")
def config():
    return BiometricConfig(encryption_key=SecretStr(TEST_ENCRYPTION_KEY))


@pytest.fixture(scope="session")
def cipher():
    return TemplateCipher(TEST_ENCRYPTION_KEY)


@pytest.fixture(scope="session")
def service(config, cipher):
    return BiometricService(config, cipher=cipher)


@pytest_asyncio.fixture
async def engine():
    engine = create_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def audit_count(db):
    """Nombre d'entrées d'audit, éventuellement filtré par action"""
    async def _count(action: AuditAction = None) -> int:
        query = select(func.count(BiometricAuditLog.id))
        if action is not None:
            query = query.where(BiometricAuditLog.action == action)
        result = await db.execute(query)
        return result.scalar_one()

    return _count
