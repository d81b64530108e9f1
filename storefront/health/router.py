from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.config import Settings, get_settings
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/config")
def health_config(request: Request, settings: Settings = Depends(get_settings)):
    """Présence des secrets (jamais leur valeur), dédup et rate limiting."""
    return JSONResponse({
        "env": settings.env_label,
        "mollie_key_present": bool(settings.mollie_api_key),
        "resend_key_present": bool(settings.resend_api_key),
        "from_email_present": bool(settings.from_email),
        "notify_email_present": bool(settings.notify_emails),
        "email_configured": settings.email_configured,
        "missing_email_settings": list(settings.missing_email_settings()),
        "dedup_enabled": getattr(request.app.state, "seen_transactions", None) is not None,
        "rate_limit": rate_limit_health_info(request),
    })
