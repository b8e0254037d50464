"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager importe `jobpost.asgi:app`.
- Toute la configuration FastAPI est centralisée dans jobpost.app_setup.factory.
"""

from jobpost.app import app

if __name__ == "__main__":
    # Exécution directe utile en développement local (uvicorn standalone).
    import os
    import uvicorn
    uvicorn.run(
        "jobpost.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
