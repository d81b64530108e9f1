"""
Configuration centralisée des logs.
- Format horodaté avec PID, sortie console (compatible Docker/Vercel)
- Bibliothèques HTTP (httpx/httpcore) ramenées à WARNING
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"

def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not any(getattr(h, "_storefront", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._storefront = True
        root.addHandler(handler)
    root.setLevel((level or "INFO").upper())

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
