# jobpost.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du service de publication par lot.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Stripe, Supabase Storage), CORS/hosts
- Fixe les limites d'ingestion multipart et la fenêtre d'ouverture du paiement
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

# Supabase Storage (logos): URL + clé service pour l'upload
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")
LOGO_BUCKET = _clean_env(os.getenv("LOGO_BUCKET") or "logos")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clé publique (transmise au client), clé secrète
STRIPE_PUBLIC_KEY = _clean_env(os.getenv("STRIPE_PUBLIC_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")

# Limites d'ingestion (octets / nombre de champs / nombre d'offres)
MAX_POSTS_PER_BATCH = _int_env("MAX_POSTS_PER_BATCH", 20)
MAX_LOGO_BYTES = _int_env("MAX_LOGO_BYTES", 2 * 1024 * 1024)
MAX_FIELD_BYTES = _int_env("MAX_FIELD_BYTES", 64 * 1024)
MAX_FORM_FIELDS = _int_env("MAX_FORM_FIELDS", 1000)

# Fenêtre maximale entre l'ouverture du paiement et le callback (secondes)
GATEWAY_OPEN_TIMEOUT_SECONDS = _int_env("GATEWAY_OPEN_TIMEOUT_SECONDS", 900)

# Redirection côté client après paiement vérifié
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/?success=true")

# Cookies/ Sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]
