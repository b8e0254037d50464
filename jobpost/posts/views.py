import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from jobpost import config
from jobpost.constants import EXPIRY_OPTIONS, JobType
from jobpost.payments.pricing import price_table
from jobpost.posts import service as posts_service
from jobpost.posts.ingest import LogoUploader, ingest_submission
from jobpost.uploads import storage
from jobpost.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/posts", tags=["Posts API"])

def get_logo_uploader() -> LogoUploader:
    return storage.upload_logo

# module jobpost.posts.views
@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def checkout(request: Request, upload: LogoUploader = Depends(get_logo_uploader)):
    """
    Endpoint d'action du formulaire de publication (multipart/form-data).
    - Le logo est streamé vers le stockage pendant le parsing.
    - 400 {"errors": {...}}: champs invalides (ou {"other": ...} si soumission illisible)
    - 200 {"order", "batch", "entries", "gatewayKey"}: commande créée
    - 502 {"error", "kind": "gateway"}: passerelle de paiement en échec
    """
    fields = await ingest_submission(request, upload)
    result = await run_in_threadpool(posts_service.process_submission, fields)
    if "errors" in result:
        return JSONResponse(status_code=400, content=result)
    return result

@router.get("/pricing")
def pricing():
    """Tarifs et options proposés, pour afficher postCount * prix côté UI."""
    return {
        "prices": price_table(),
        "currencies": list(price_table().keys()),
        "jobTypes": [t.value for t in JobType],
        "expiryOptions": list(EXPIRY_OPTIONS),
        "maxPosts": config.MAX_POSTS_PER_BATCH,
    }
