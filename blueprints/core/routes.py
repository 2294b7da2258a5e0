from __future__ import annotations
import json, logging
from datetime import datetime, UTC

from flask import g, jsonify, request
from werkzeug.wrappers.response import Response

from . import bp

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("event", "path", "method", "status", "duration_ms"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _setup_structured_logging(app):
    logger = app.logger
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    # логгеры сервисов (blueprints.*) пишут туда же
    svc_logger = logging.getLogger("blueprints")
    if not any(isinstance(getattr(h, "formatter", None), JSONFormatter) for h in svc_logger.handlers):
        svc_handler = logging.StreamHandler()
        svc_handler.setFormatter(JSONFormatter())
        svc_logger.addHandler(svc_handler)
        svc_logger.setLevel(logging.INFO)

@bp.before_app_request
def _preflight_and_start_timer():
    g._req_start = datetime.now(UTC)
    # CORS preflight отвечаем сразу, без авторизации
    if request.method == "OPTIONS":
        return Response(status=204, headers=CORS_HEADERS)

@bp.after_app_request
def _cors_and_log(response: Response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    try:
        duration_ms = int((datetime.now(UTC) - g._req_start).total_seconds() * 1000)
    except AttributeError:
        duration_ms = None
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    logging.getLogger("blueprints.core").info("request handled", extra=extra)
    return response

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z"),
    })
