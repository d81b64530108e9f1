# storefront.config
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional, Tuple
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du service.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Regroupe secrets/URLs (Mollie, Resend), CORS et options de déduplication
  dans une structure immuable `Settings`, injectée dans chaque composant
- `get_settings()` sert de dépendance FastAPI (surchargée dans les tests)
"""

DEFAULT_ALLOWED_ORIGINS = (
    "https://boxplanet.shop",
    "https://www.boxplanet.shop",
    "http://localhost:3000",
)

def _clean_env(v: Optional[str]) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _split_csv(v: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in (v or "").split(",") if part.strip())

def _int_env(v: str, default: int) -> int:
    try:
        return int(_clean_env(v) or default)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Configuration injectée dans les composants (jamais lue ad hoc depuis os.environ)."""
    live_mode: bool = False
    mollie_live_key: str = ""
    mollie_test_key: str = ""
    mollie_fallback_key: str = ""
    mollie_api_base: str = "https://api.mollie.com/v2"
    resend_api_key: str = ""
    resend_api_base: str = "https://api.resend.com"
    from_email: str = ""
    notify_emails: Tuple[str, ...] = ()
    redirect_url: str = "https://boxplanet.shop/checkout/success"
    webhook_url: str = "https://boxplanet.vercel.app/api/mollie-webhook"
    cors_allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    http_timeout_seconds: int = 10
    default_vat_rate: str = "19"
    payment_description: str = "Boxplanet Direktkauf"
    order_locale: str = "de_DE"
    seen_transactions_redis_url: str = ""
    seen_transactions_ttl_seconds: int = 30 * 24 * 3600

    @property
    def env_label(self) -> str:
        return "LIVE" if self.live_mode else "TEST"

    @property
    def mollie_api_key(self) -> str:
        """Clé Mollie selon l'environnement (live/test), avec MOLLIE_API_KEY en repli."""
        key = self.mollie_live_key if self.live_mode else self.mollie_test_key
        return key or self.mollie_fallback_key

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key and self.from_email and self.notify_emails)

    def missing_email_settings(self) -> Tuple[str, ...]:
        missing = []
        if not self.resend_api_key:
            missing.append("RESEND_API_KEY")
        if not self.from_email:
            missing.append("FROM_EMAIL")
        if not self.notify_emails:
            missing.append("NOTIFY_EMAIL")
        return tuple(missing)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Construit Settings depuis un mapping d'environnement (os.environ par défaut).
    - APP_ENV (ou VERCEL_ENV) = "production" => mode live
    - Les URLs de redirection/webhook peuvent être surchargées
    """
    env = os.environ if environ is None else environ
    app_env = _clean_env(env.get("APP_ENV") or env.get("VERCEL_ENV") or "").lower()
    defaults = Settings()
    return Settings(
        live_mode=(app_env == "production"),
        mollie_live_key=_clean_env(env.get("MOLLIE_LIVE_KEY")),
        mollie_test_key=_clean_env(env.get("MOLLIE_TEST_KEY")),
        mollie_fallback_key=_clean_env(env.get("MOLLIE_API_KEY")),
        mollie_api_base=(_clean_env(env.get("MOLLIE_API_BASE")) or defaults.mollie_api_base).rstrip("/"),
        resend_api_key=_clean_env(env.get("RESEND_API_KEY")),
        resend_api_base=(_clean_env(env.get("RESEND_API_BASE")) or defaults.resend_api_base).rstrip("/"),
        from_email=_clean_env(env.get("FROM_EMAIL")),
        notify_emails=_split_csv(_clean_env(env.get("NOTIFY_EMAIL"))),
        redirect_url=_clean_env(env.get("MOLLIE_REDIRECT_URL")) or defaults.redirect_url,
        webhook_url=_clean_env(env.get("MOLLIE_WEBHOOK_URL")) or defaults.webhook_url,
        cors_allowed_origins=_split_csv(_clean_env(env.get("CORS_ALLOWED_ORIGINS"))) or DEFAULT_ALLOWED_ORIGINS,
        http_timeout_seconds=_int_env(env.get("HTTP_TIMEOUT_SECONDS", ""), defaults.http_timeout_seconds),
        default_vat_rate=_clean_env(env.get("DEFAULT_VAT_RATE")) or defaults.default_vat_rate,
        payment_description=_clean_env(env.get("PAYMENT_DESCRIPTION")) or defaults.payment_description,
        order_locale=_clean_env(env.get("ORDER_LOCALE")) or defaults.order_locale,
        seen_transactions_redis_url=_clean_env(env.get("SEEN_TRANSACTIONS_REDIS_URL")),
        seen_transactions_ttl_seconds=_int_env(
            env.get("SEEN_TRANSACTIONS_TTL_SECONDS", ""), defaults.seen_transactions_ttl_seconds
        ),
    )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Dépendance FastAPI: Settings chargés une seule fois par process."""
    return load_settings()
