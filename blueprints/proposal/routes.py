# blueprints/proposal/routes.py
from __future__ import annotations
import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user
from pydantic import ValidationError

from extensions import db
from blueprints.auth.routes import party_required
from . import services as svc
from .policies import current_policy
from .schemas import ProposalActionIn

api_bp = Blueprint("proposal_api", __name__)
log = logging.getLogger(__name__)

def _json_err(msg: str, http: int = 400, detail=None):
    body = {"error": msg}
    if detail is not None:
        body["detail"] = detail
    return jsonify(body), http

@api_bp.get("/proposal")
@api_bp.get("/proposals")
@party_required
def api_proposal_get():
    party = current_user.username
    policy = current_policy()
    try:
        state = svc.duel_state(party) if policy.per_owner else svc.shared_state(party)
    except Exception:
        log.exception("failed to fetch proposal")
        return _json_err("Failed to fetch proposal", 500)
    return jsonify({"policy": policy.name, **state})

@api_bp.put("/proposal")
@api_bp.put("/proposals")
@party_required
def api_proposal_update():
    payload = request.get_json(silent=True) or {}
    try:
        data = ProposalActionIn.model_validate(payload)
    except ValidationError as ve:
        return _json_err("Invalid payload", 422, detail={
            "code": "validation_error",
            "errors": ve.errors(include_url=False, include_context=False),
        })

    party = current_user.username
    policy = current_policy()
    try:
        result = svc.apply_action(policy, data, actor=party)
        db.session.commit()
    except svc.ProposalNotOwnerError as e:
        db.session.rollback()
        return _json_err(str(e), 403)
    except svc.ProposalValidationError as e:
        db.session.rollback()
        return _json_err(str(e), 400)
    except svc.ProposalConflictError as e:
        db.session.rollback()
        return _json_err(str(e), 409)
    except Exception:
        db.session.rollback()
        log.exception("proposal action %s by %s failed", data.action, party)
        return _json_err("Failed to update proposal", 500)

    return jsonify({"success": True, **result})
