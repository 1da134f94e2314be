"""
Application principale FastAPI
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from biometrie.config import settings
from biometrie.database import init_db
from biometrie.routers import biometrics
from biometrie.services.biometric_service import get_biometric_service

logger = logging.getLogger(__name__)


def configure_logging():
    """Format et niveau des logs de l'application"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application"""
    # Startup
    configure_logging()
    await init_db()
    # Dérive la clé dès le démarrage plutôt qu'à la première requête
    get_biometric_service()
    logger.info("Base de données initialisée, service biométrique prêt")
    yield
    # Shutdown
    logger.info("Arrêt de l'application")


# Créer l'application FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    Service d'enrôlement et de validation biométrique

    - Enrôlement de gabarits chiffrés (empreinte, visage, voix, iris)
    - Validation d'un échantillon avec score de confiance et seuil d'admission
    - Journal d'audit de chaque tentative
    """,
    lifespan=lifespan
)

# Configuration CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # En production, spécifier les origines autorisées
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Inclure les routers
app.include_router(biometrics.router, prefix="/api")


@app.get("/")
async def root():
    """Page d'accueil"""
    return {
        "message": "Service biométrique",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health_check():
    """Vérification de santé"""
    return {"status": "healthy", "version": settings.APP_VERSION}
