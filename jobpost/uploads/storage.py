"""
Collaborateur d'upload des logos (Supabase Storage).

- Le fichier est envoyé en streaming à l'API REST Storage (jamais bufferisé).
- L'URL publique est calculée via le client supabase (bucket public).
- Toute erreur (réseau, refus du provider) devient UploadError.
"""
import logging
import mimetypes
import os
from typing import AsyncIterator
from uuid import uuid4

import httpx

from jobpost.config import LOGO_BUCKET, SUPABASE_SERVICE_KEY, SUPABASE_URL
from jobpost.errors import UploadError
from jobpost.infra.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)

UPLOAD_TIMEOUT = httpx.Timeout(30.0, connect=5.0)

# module jobpost.uploads.storage
def build_logo_path(filename: str, content_type: str) -> str:
    """
    Chemin objet unique: logos/<uuid><ext>.
    L'extension vient du nom de fichier, sinon du type MIME.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    if not ext or len(ext) > 6:
        ext = mimetypes.guess_extension(content_type or "") or ""
    return f"logos/{uuid4().hex}{ext}"

def public_logo_url(path: str) -> str:
    url = get_service_supabase().storage.from_(LOGO_BUCKET).get_public_url(path)
    # certaines versions du client ajoutent un "?" final
    return url.rstrip("?")

async def upload_logo(chunks: AsyncIterator[bytes], filename: str, content_type: str) -> str:
    """
    Envoie le flux `chunks` dans le bucket LOGO_BUCKET et retourne l'URL publique.
    Lève UploadError si Storage n'est pas configuré ou refuse l'objet.
    """
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        raise UploadError("Stockage des logos non configuré")
    path = build_logo_path(filename, content_type)
    endpoint = f"{SUPABASE_URL}/storage/v1/object/{LOGO_BUCKET}/{path}"
    headers = {
        "Authorization": f"Bearer {SUPABASE_SERVICE_KEY}",
        "apikey": SUPABASE_SERVICE_KEY,
        "Content-Type": content_type,
        "x-upsert": "false",
    }
    try:
        async with httpx.AsyncClient(timeout=UPLOAD_TIMEOUT) as client:
            resp = await client.post(endpoint, content=chunks, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("uploads.logo transport error path=%s err=%s", path, e)
        raise UploadError("Stockage des logos injoignable") from e
    if resp.status_code >= 400:
        logger.warning("uploads.logo refused path=%s status=%s body=%s", path, resp.status_code, resp.text[:200])
        raise UploadError("Le stockage a refusé le logo")
    url = public_logo_url(path)
    logger.info("uploads.logo stored path=%s", path)
    return url
