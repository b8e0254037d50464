"""
Registre central des routers (API v1, health).
"""
from fastapi import FastAPI
from jobpost.posts import views as posts_views
from jobpost.payments import views as payments_views
from jobpost.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(posts_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
