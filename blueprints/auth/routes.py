# blueprints/auth/routes.py
from __future__ import annotations
import base64
import binascii
import json
import logging
import time
from functools import wraps
from typing import Callable, Optional

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from extensions import db, login_manager
from models import User

api_bp = Blueprint("auth_api", __name__)
log = logging.getLogger(__name__)

# ---- безопасные значения по умолчанию
DEFAULT_RL_MAX = 5
DEFAULT_RL_WIN = 300  # 5 минут
_login_attempts: dict[str, list[float]] = {}  # ключ: ip|username -> [timestamps]

# ---------- bearer-токен ----------
# Токен: base64 от {"userId", "username"}: обратимая кодировка без подписи.
def encode_token(user: User) -> str:
    raw = json.dumps({"userId": user.id, "username": user.username}, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")

def decode_token(token: str) -> Optional[dict]:
    try:
        data = json.loads(base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeError):
        return None
    if not isinstance(data, dict) or "userId" not in data or "username" not in data:
        return None
    return data

def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[7:].strip() or None

@login_manager.request_loader
def load_user_from_request(req) -> Optional[User]:
    token = _bearer_token()
    if not token:
        return None
    data = decode_token(token)
    if data is None:
        return None
    try:
        user = db.session.get(User, int(data["userId"]))
    except (TypeError, ValueError):
        return None
    if user is None or user.username != data["username"] or not user.is_active:
        return None
    return user

@login_manager.user_loader
def load_user(uid: str) -> Optional[User]:
    # сессий нет, но Flask-Login требует user_loader
    try:
        return db.session.get(User, int(uid))
    except (TypeError, ValueError):
        return None

# ---------- rate limit ----------
def _rl_key(username: str) -> str:
    ip = request.headers.get("X-Forwarded-For", request.remote_addr or "0.0.0.0").split(",")[0].strip()
    return f"{ip}|{(username or '').lower()}"

def _rl_check_and_hit(username: str) -> bool:
    now = time.time()
    win = current_app.config.get("AUTH_RL_WINDOW", DEFAULT_RL_WIN)
    mx = current_app.config.get("AUTH_RL_MAX", DEFAULT_RL_MAX)
    key = _rl_key(username)
    bucket = _login_attempts.setdefault(key, [])
    # purge старых
    cutoff = now - win
    while bucket and bucket[0] < cutoff:
        bucket.pop(0)
    if len(bucket) >= mx:
        return False
    bucket.append(now)
    return True

def reset_rate_limit() -> None:
    _login_attempts.clear()

# ---------- декораторы ----------
def party_required(fn: Callable):
    """Только Jennifer или Klas: остальные пользователи могут лишь смотреть."""
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        if not getattr(current_user, "is_party", False):
            return jsonify({"error": "Forbidden"}), 403
        return fn(*args, **kwargs)
    return wrapper

# ---------- обработчик 401 ----------
@login_manager.unauthorized_handler
def _unauth():
    return jsonify({"error": "Unauthorized"}), 401

# ---------- API ----------
@api_bp.post("/login")
def api_login():
    payload = request.get_json(silent=True) or request.form or {}
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""

    if not username or not password:
        return jsonify({"error": "Username and password required"}), 400

    if not _rl_check_and_hit(username):
        log.warning("login rate limit hit for %s", username)
        return jsonify({"error": "Too many attempts"}), 429

    user: Optional[User] = User.query.filter_by(username=username).first()
    if not user or not user.password_hash or not user.check_password(password):
        return jsonify({"error": "Invalid credentials"}), 401

    if not user.is_active:
        return jsonify({"error": "Inactive user"}), 403

    return jsonify({
        "success": True,
        "user": {"id": user.id, "username": user.username},
        "token": encode_token(user),
    })
