"""
Script de démarrage de l'application
"""
import uvicorn
import asyncio

from biometrie.config import settings
from biometrie.database import init_db


async def main():
    """Initialisation de la base avant le démarrage du serveur"""
    print("Démarrage du service biométrique...")
    await init_db()
    print("Base de données initialisée")


if __name__ == "__main__":
    # Initialisation
    asyncio.run(main())

    # Démarrer le serveur
    print("\nServeur démarré sur http://localhost:8000")
    print("Documentation API: http://localhost:8000/docs\n")

    uvicorn.run(
        "biometrie.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
