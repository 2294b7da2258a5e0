# blueprints/schedule/routes.py
from __future__ import annotations
import logging
from datetime import MAXYEAR, MINYEAR, date

from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import login_required, current_user

from blueprints.schedule import services as svc
from blueprints.schedule.calendar_logic import (
    calculate_statistics, calendar_days, day_info, default_statistics_range,
)
from blueprints.proposal.policies import current_policy
from blueprints.proposal import services as proposal_svc

api_bp = Blueprint("schedule_api", __name__)
log = logging.getLogger(__name__)

def _parse_date(name: str) -> date | None:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        abort(400, description=f"Bad {name}")

def _view_data() -> tuple[list, list]:
    """Записи и комментарии для выбранного режима: confirmed (по умолчанию) или proposal."""
    view = (request.args.get("view") or "confirmed").lower()
    if view not in ("confirmed", "proposal"):
        abort(400, description="Bad view")
    if view == "proposal":
        p = proposal_svc.draft_for_view(current_policy(), current_user.username)
        # нет черновика, показываем подтверждённое расписание
        if p is not None:
            return p.schedule_data, p.day_comment_data
    return svc.list_entries(), [c.to_dict() for c in svc.list_day_comments()]

@api_bp.errorhandler(400)
def _bad_request(e):
    return jsonify({"error": getattr(e, "description", None) or "Bad request"}), 400

@api_bp.get("/schedule")
@login_required
def api_schedule():
    try:
        return jsonify(svc.confirmed_payload())
    except Exception:
        log.exception("failed to fetch schedule")
        return jsonify({"error": "Failed to fetch schedule"}), 500

@api_bp.get("/schedule/statistics")
@login_required
def api_statistics():
    d_from, d_to = _parse_date("date_from"), _parse_date("date_to")
    if d_from is None or d_to is None:
        dflt_from, dflt_to = default_statistics_range(date.today(), current_app.config.get("STATS_MONTHS", 12))
        d_from, d_to = d_from or dflt_from, d_to or dflt_to
    if d_to < d_from:
        d_from, d_to = d_to, d_from
    if (d_to - d_from).days + 1 > current_app.config.get("STATS_MAX_DAYS", 3660):
        abort(400, description="Date range too long")
    entries, _ = _view_data()
    stats = calculate_statistics(entries, d_from, d_to)
    stats.update({"date_from": d_from.isoformat(), "date_to": d_to.isoformat()})
    return jsonify(stats)

@api_bp.get("/calendar/<int:year>/<int:month>")
@login_required
def api_calendar_month(year: int, month: int):
    if not MINYEAR <= year <= MAXYEAR:
        abort(400, description="Bad year")
    if not 1 <= month <= 12:
        abort(400, description="Bad month")
    entries, comments = _view_data()
    return jsonify({
        "year": year,
        "month": month,
        "days": [day_info(d, month, entries, comments) for d in calendar_days(year, month)],
    })
