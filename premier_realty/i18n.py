"""
Locale support
Supported site locales and locale-prefixed routing (/tr/properties -> /properties)
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

LOCALES = {
    "en": {"name": "English", "flag": "🇬🇧"},
    "tr": {"name": "Türkçe", "flag": "🇹🇷"},
    "ms": {"name": "Bahasa Melayu", "flag": "🇲🇾"},
    "id": {"name": "Bahasa Indonesia", "flag": "🇮🇩"},
    "es": {"name": "Español", "flag": "🇪🇸"},
    "pt": {"name": "Português", "flag": "🇵🇹"},
    "de": {"name": "Deutsch", "flag": "🇩🇪"},
    "fr": {"name": "Français", "flag": "🇫🇷"},
    "it": {"name": "Italiano", "flag": "🇮🇹"},
    "zh": {"name": "中文", "flag": "🇨🇳"},
    "ja": {"name": "日本語", "flag": "🇯🇵"},
    "hi": {"name": "हिन्दी", "flag": "🇮🇳"},
}

router = APIRouter(tags=["Locales"])


def normalize_locale(value: Optional[str]) -> Optional[str]:
    """Map "pt-BR" or "TR" to a supported locale code, or None"""
    if not value:
        return None
    code = value.strip().lower().replace("_", "-").split("-")[0]
    return code if code in LOCALES else None


def negotiate_locale(accept_language: Optional[str]) -> str:
    """Best supported locale from an Accept-Language header"""
    if not accept_language:
        return DEFAULT_LOCALE

    candidates = []
    for position, part in enumerate(accept_language.split(",")):
        pieces = part.strip().split(";")
        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        candidates.append((-quality, position, pieces[0]))

    for _, _, tag in sorted(candidates):
        locale = normalize_locale(tag)
        if locale:
            return locale
    return DEFAULT_LOCALE


def split_locale_prefix(path: str) -> tuple[Optional[str], str]:
    """("/tr/blog/x") -> ("tr", "/blog/x"); paths without a locale segment are returned unchanged"""
    segments = path.split("/", 2)
    if len(segments) > 1 and segments[1] in LOCALES:
        rest = "/" + segments[2] if len(segments) > 2 else "/"
        return segments[1], rest
    return None, path


class LocaleMiddleware(BaseHTTPMiddleware):
    """Strips a leading locale segment and exposes the active locale as request.state.locale"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        locale, path = split_locale_prefix(request.url.path)
        if locale:
            request.scope["path"] = path
            request.scope["raw_path"] = path.encode()
        else:
            locale = negotiate_locale(request.headers.get("accept-language"))

        request.state.locale = locale
        response = await call_next(request)
        response.headers["Content-Language"] = locale
        return response


def get_request_locale(request: Request) -> str:
    return getattr(request.state, "locale", DEFAULT_LOCALE)


@router.get("/locales")
async def list_locales():
    """Locales the site is translated into"""
    return {
        "default": DEFAULT_LOCALE,
        "locales": [{"code": code, **meta} for code, meta in LOCALES.items()],
    }
