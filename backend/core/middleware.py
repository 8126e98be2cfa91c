from __future__ import annotations
import threading
from typing import Optional, Any
import json
import logging
import uuid

from django.conf import settings
from django.http import JsonResponse

_local = threading.local()

def get_current_user() -> Optional[Any]:
    """Returns the user stored in the thread-local for this request, or None."""
    return getattr(_local, "user", None)

def _client_ip(request):
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")

def _redact_mapping(data):
    SENSITIVE = {"password", "pin", "currentpin", "newpin", "token", "authorization", "csrfmiddlewaretoken"}
    out = {}
    try:
        items = (data or {}).items()
    except (AttributeError, TypeError):
        return {}
    for k, v in items:
        key = str(k).lower()
        if key in SENSITIVE:
            out[k] = "***redacted***"
        else:
            out[k] = v if isinstance(v, (str, int, float, bool, type(None))) else str(v)
    return out

def _redact_json_body(raw: bytes) -> str:
    text = raw[:2048].decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, dict):
        return json.dumps(_redact_mapping(payload), ensure_ascii=False)
    return text


class CurrentUserMiddleware:
    """Stores request.user in a thread-local so signals and services can read it."""
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        _local.user = request.user if getattr(request, "user", None) and request.user.is_authenticated else None
        try:
            return self.get_response(request)
        finally:
            _local.user = None

class LoginRequiredMiddleware:
    """Rejects unauthenticated requests outside the exempt prefixes with a JSON 401."""
    def __init__(self, get_response):
        self.get_response = get_response
        self.exempt = tuple(getattr(settings, "LOGIN_EXEMPT_PREFIXES", []))

    def __call__(self, request):
        path = request.path_info or "/"
        if path.startswith("/" + getattr(settings, "STATIC_URL", "static/").lstrip("/")):
            return self.get_response(request)
        if any(path.startswith(p) for p in self.exempt):
            return self.get_response(request)
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return self.get_response(request)
        return JsonResponse({"message": "Authentication required.", "code": "unauthenticated"}, status=401)

class ErrorLoggingMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response
        self.logger = logging.getLogger("django.request")

    def __call__(self, request):
        req_id = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        request._request_id = req_id
        try:
            response = self.get_response(request)
        except Exception:
            self._log_exception(request)
            raise
        if getattr(response, "status_code", 200) >= 500:
            self._log_5xx(request, response)
        return response

    def _build_context(self, request):
        content_type = request.META.get("CONTENT_TYPE", "")
        body_excerpt = None

        if "application/json" in content_type:
            try:
                body_excerpt = _redact_json_body(request.body or b"")
            except Exception:
                body_excerpt = "<unavailable>"

        user = getattr(request, "user", None)
        username = (user.username or "<unavailable>") if user and user.is_authenticated else "Anonymous"

        return {
            "id": getattr(request, "_request_id", None),
            "method": request.method,
            "path": request.get_full_path(),
            "ip": _client_ip(request),
            "user": username,
            "ua": request.META.get("HTTP_USER_AGENT", ""),
            "referer": request.META.get("HTTP_REFERER", ""),
            "get": _redact_mapping(getattr(request, "GET", {})),
            "post": _redact_mapping(getattr(request, "POST", {})),
            "json_body_excerpt": body_excerpt,
        }

    def _log_exception(self, request):
        ctx = self._build_context(request)
        self.logger.error(
            "Unhandled exception | ctx=%s",
            json.dumps(ctx, ensure_ascii=False),
            exc_info=True,
        )

    def _log_5xx(self, request, response):
        ctx = self._build_context(request)
        ctx["status_code"] = getattr(response, "status_code", None)
        self.logger.error(
            "5xx response | ctx=%s",
            json.dumps(ctx, ensure_ascii=False),
        )
