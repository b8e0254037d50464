from urllib.parse import urlparse
import socket
from jobpost.config import SUPABASE_URL, LOGO_BUCKET, STRIPE_SECRET_KEY, STRIPE_PUBLIC_KEY
from jobpost.infra.supabase_client import get_service_supabase

def _check_bucket(client, name: str):
    try:
        bucket = client.storage.get_bucket(name)
        public = getattr(bucket, "public", None)
        return {"ok": True, "public": public}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_storage_info():
    effective_url = SUPABASE_URL
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "bucket": {"name": LOGO_BUCKET},
        "gateway": {
            "secret_key": bool(STRIPE_SECRET_KEY),
            "public_key": bool(STRIPE_PUBLIC_KEY),
        },
    }
    try:
        client = get_service_supabase()
        info["bucket"].update(_check_bucket(client, LOGO_BUCKET))
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info
