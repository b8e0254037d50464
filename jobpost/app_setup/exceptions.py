"""
Gestionnaires d'exceptions métier.
- SubmissionError/UploadError: même contrat que la validation, sous la clé "other" (400).
- GatewayError: distinct des erreurs de champ (502, kind=gateway).
- VerificationFailure: {"error": ...} (400).
- PricingConfigError: erreur de configuration (500).
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jobpost.errors import (
    GatewayError,
    HandshakeStateError,
    PricingConfigError,
    SubmissionError,
    VerificationFailure,
)

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SubmissionError)
    async def submission_error(request: Request, exc: SubmissionError):
        logger.info("submission rejected path=%s code=%s", request.url.path, exc.code)
        return JSONResponse(status_code=400, content={"errors": {"other": str(exc)}})

    @app.exception_handler(GatewayError)
    async def gateway_error(request: Request, exc: GatewayError):
        return JSONResponse(status_code=502, content={"error": str(exc), "kind": "gateway"})

    @app.exception_handler(VerificationFailure)
    async def verification_failure(request: Request, exc: VerificationFailure):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(PricingConfigError)
    async def pricing_config_error(request: Request, exc: PricingConfigError):
        logger.error("pricing configuration error: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Configuration des tarifs invalide", "kind": "config"})

    @app.exception_handler(HandshakeStateError)
    async def handshake_state_error(request: Request, exc: HandshakeStateError):
        return JSONResponse(status_code=409, content={"error": str(exc)})

