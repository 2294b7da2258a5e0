# blueprints/proposal/services.py
"""
Жизненный цикл черновика расписания и правила его слияния с подтверждённым.

Любое изменение содержимого черновика (расписание или комментарии к дням)
сбрасывает оба флага согласия. Функции ничего не коммитят: транзакцией
управляет маршрут, поэтому слияние либо проходит целиком, либо откатывается.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select, update

from config import PARTIES
from extensions import db
from models import (
    Proposal, ProposalEntry, ProposalDayComment, ProposalComment,
)
from blueprints.schedule import services as schedule_svc
from .policies import ConsentPolicy, OWNER_ONLY_ACTIONS, OTHER_ONLY_ACTIONS
from .schemas import ProposalActionIn, ScheduleEntryIn, DayCommentIn

log = logging.getLogger(__name__)


# ---------- ошибки ----------
class ProposalValidationError(ValueError):
    """Нет обязательного поля или нет активного черновика → 400."""

class ProposalNotOwnerError(PermissionError):
    """Действие над чужим (или, наоборот, своим) черновиком → 403."""

class ProposalConflictError(RuntimeError):
    """Состояние не допускает действие, например второй активный черновик → 409."""


# ---------- helpers ----------
def other_party(party: str) -> str:
    return PARTIES[1] if party == PARTIES[0] else PARTIES[0]

def _flag_name(party: str) -> str:
    return f"{party.lower()}_accepted"

def _reset_consent(p: Proposal) -> None:
    p.jennifer_accepted = False
    p.klas_accepted = False

def _set_entries(p: Proposal, rows) -> None:
    # delete-orphan удалит старые строки черновика
    p.entries = [
        ProposalEntry(position=i, switch_date=switch_date, parent_after=parent_after)
        for i, (switch_date, parent_after) in enumerate(rows)
    ]

def _set_day_comments(p: Proposal, rows) -> None:
    p.day_comments = [
        ProposalDayComment(position=i, date=d, comment=comment, author=author)
        for i, (d, comment, author) in enumerate(rows)
    ]

def _entry_rows(entries: List[ScheduleEntryIn]):
    return [(e.switch_date, e.parent_after) for e in entries]

def _day_comment_rows(comments: List[DayCommentIn], actor: str):
    return [(c.date, c.comment, c.author or actor) for c in comments]

def _copy_confirmed(p: Proposal) -> None:
    _set_entries(p, [(e.switch_date, e.parent_after) for e in schedule_svc.list_entries()])
    _set_day_comments(p, [(c.date, c.comment, c.author) for c in schedule_svc.list_day_comments()])

def _copy_draft(src: Proposal, dst: Proposal) -> None:
    _set_entries(dst, [(e.switch_date, e.parent_after) for e in src.entries])
    _set_day_comments(dst, [(c.date, c.comment, c.author) for c in src.day_comments])

def _merge_into_confirmed(p: Proposal) -> None:
    """Подтверждённое расписание целиком заменяется черновиком (без диффа)."""
    schedule_svc.replace_schedule((e.switch_date, e.parent_after) for e in p.entries)
    schedule_svc.replace_day_comments((c.date, c.comment, c.author) for c in p.day_comments)
    p.comments.clear()
    log.info("proposal %s merged into confirmed schedule", p.id)


# ---------- общий черновик (single / bilateral) ----------
def active_shared_proposal() -> Optional[Proposal]:
    return (Proposal.query
            .filter(Proposal.owner.is_(None), Proposal.is_active.is_(True))
            .order_by(Proposal.id.desc())
            .first())

def _require_active() -> Proposal:
    p = active_shared_proposal()
    if p is None:
        raise ProposalValidationError("No active proposal")
    return p

def create(*, actor: str, **_) -> Dict[str, Any]:
    if active_shared_proposal() is not None:
        raise ProposalConflictError("Proposal already exists")

    # журнал комментариев живёт ровно один черновик
    shared_ids = select(Proposal.id).where(Proposal.owner.is_(None))
    ProposalComment.query.filter(ProposalComment.proposal_id.in_(shared_ids)).delete(synchronize_session=False)

    p = Proposal(owner=None, is_active=True, is_sent=False,
                 created_by=actor, last_updated_by=actor)
    _reset_consent(p)
    _copy_confirmed(p)
    db.session.add(p)
    db.session.flush()
    log.info("proposal %s created by %s", p.id, actor)
    return {"proposal_id": p.id}

def update_schedule(*, actor: str, data: ProposalActionIn, **_) -> Dict[str, Any]:
    if data.schedule_data is None:
        raise ProposalValidationError("schedule_data required")
    p = _require_active()
    _set_entries(p, _entry_rows(data.schedule_data))
    p.last_updated_by = actor
    _reset_consent(p)
    return {}

def update_day_comments(*, actor: str, data: ProposalActionIn, **_) -> Dict[str, Any]:
    if data.day_comments is None:
        raise ProposalValidationError("day_comments required")
    p = _require_active()
    _set_day_comments(p, _day_comment_rows(data.day_comments, actor))
    p.last_updated_by = actor
    _reset_consent(p)
    return {}

def _clean_comment(data: ProposalActionIn) -> str:
    text = (data.comment or "").strip()
    if not text:
        raise ProposalValidationError("comment required")
    return text

def add_comment(*, actor: str, data: ProposalActionIn, **_) -> Dict[str, Any]:
    text = _clean_comment(data)
    p = _require_active()
    p.comments.append(ProposalComment(author=actor, comment=text))
    return {}

def accept(*, actor: str, policy: ConsentPolicy, **_) -> Dict[str, Any]:
    """
    Ставит флаг согласия actor-а. Слияние только когда набрано
    policy.approvals_required согласий.

    Флаг ставится условным UPDATE ... WHERE is_active, а черновик гасится
    вторым условным UPDATE, который проходит, только если оба флага уже стоят:
    из двух одновременных accept слияние выполнит ровно один.
    """
    p = _require_active()

    res = db.session.execute(
        update(Proposal)
        .where(Proposal.id == p.id, Proposal.is_active.is_(True))
        .values({_flag_name(actor): True})
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        raise ProposalValidationError("No active proposal")

    claim = update(Proposal).where(Proposal.id == p.id, Proposal.is_active.is_(True))
    if policy.approvals_required >= 2:
        claim = claim.where(Proposal.jennifer_accepted.is_(True), Proposal.klas_accepted.is_(True))
    won = db.session.execute(
        claim.values(is_active=False).execution_options(synchronize_session=False)
    ).rowcount == 1
    db.session.refresh(p)

    log.info("proposal %s accepted by %s", p.id, actor)
    if won:
        _merge_into_confirmed(p)
    return {"merged": won}

def delete(*, actor: str, **_) -> Dict[str, Any]:
    p = _require_active()
    p.is_active = False
    p.comments.clear()
    log.info("proposal %s deleted by %s", p.id, actor)
    return {}

SHARED_HANDLERS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "create": create,
    "update_schedule": update_schedule,
    "update_day_comments": update_day_comments,
    "add_comment": add_comment,
    "accept": accept,
    "delete": delete,
}


# ---------- личные черновики (duel) ----------
def owner_proposal(owner: str, create_missing: bool = True) -> Optional[Proposal]:
    p = Proposal.query.filter_by(owner=owner).first()
    if p is None and create_missing:
        p = Proposal(owner=owner, is_active=False, is_sent=False, created_by=owner)
        _reset_consent(p)
        db.session.add(p)
        db.session.flush()
    return p

def _clear_draft(p: Proposal) -> None:
    p.is_active = False
    p.is_sent = False
    _set_entries(p, [])
    _set_day_comments(p, [])
    _reset_consent(p)
    p.comments.clear()

def _require_own_active(p: Proposal) -> None:
    if not p.is_active:
        raise ProposalValidationError("Proposal is not active")

def _require_has_data(p: Proposal) -> None:
    # неактивный черновик не содержит данных
    if not p.is_active:
        raise ProposalValidationError("Proposal has no data")

def _require_sent(p: Proposal) -> None:
    _require_has_data(p)
    if not p.is_sent:
        raise ProposalValidationError("Proposal has not been sent")

def check_duel_access(action: str, owner: Optional[str], actor: str) -> str:
    if owner is None:
        raise ProposalValidationError("owner required")
    if action in OWNER_ONLY_ACTIONS and owner != actor:
        raise ProposalNotOwnerError("Can only modify your own proposal")
    if action in OTHER_ONLY_ACTIONS and owner == actor:
        raise ProposalNotOwnerError("Can only respond to other person's proposal")
    return owner

def duel_activate(*, actor: str, owner: str, **_):
    p = owner_proposal(owner)
    _copy_confirmed(p)
    p.is_active = True
    p.is_sent = False
    p.last_updated_by = actor
    _reset_consent(p)
    p.comments.clear()
    log.info("%s activated own proposal", owner)
    return {"proposal_id": p.id}

def duel_deactivate(*, actor: str, owner: str, **_):
    _clear_draft(owner_proposal(owner))
    return {}

def duel_update_schedule(*, actor: str, owner: str, data: ProposalActionIn, **_):
    if data.schedule_data is None:
        raise ProposalValidationError("schedule_data required")
    p = owner_proposal(owner)
    _require_own_active(p)
    _set_entries(p, _entry_rows(data.schedule_data))
    p.last_updated_by = actor
    _reset_consent(p)
    return {}

def duel_update_day_comments(*, actor: str, owner: str, data: ProposalActionIn, **_):
    if data.day_comments is None:
        raise ProposalValidationError("day_comments required")
    p = owner_proposal(owner)
    _require_own_active(p)
    _set_day_comments(p, _day_comment_rows(data.day_comments, actor))
    p.last_updated_by = actor
    _reset_consent(p)
    return {}

def duel_copy_from_confirmed(*, actor: str, owner: str, **_):
    p = owner_proposal(owner)
    _copy_confirmed(p)
    p.last_updated_by = actor
    _reset_consent(p)
    return {}

def duel_copy_from_other(*, actor: str, owner: str, **_):
    src = owner_proposal(other_party(owner))
    _require_has_data(src)
    p = owner_proposal(owner)
    _copy_draft(src, p)
    p.last_updated_by = actor
    _reset_consent(p)
    return {}

def duel_send(*, actor: str, owner: str, **_):
    p = owner_proposal(owner)
    _require_own_active(p)
    p.is_sent = True
    log.info("%s sent proposal %s", owner, p.id)
    return {}

def duel_respond(*, actor: str, owner: str, **_):
    # owner: сторона, на чей черновик отвечаем
    src = owner_proposal(owner)
    _require_sent(src)
    mine = owner_proposal(actor)
    _copy_draft(src, mine)
    mine.is_active = True
    mine.is_sent = False
    mine.last_updated_by = actor
    _reset_consent(mine)
    return {"proposal_id": mine.id}

def duel_accept(*, actor: str, owner: str, **_):
    src = owner_proposal(owner)
    _require_sent(src)
    src.jennifer_accepted = src.jennifer_accepted or actor == "Jennifer"
    src.klas_accepted = src.klas_accepted or actor == "Klas"
    _merge_into_confirmed(src)
    for party in PARTIES:
        _clear_draft(owner_proposal(party))
    log.info("%s accepted proposal of %s", actor, owner)
    return {"merged": True}

def duel_add_comment(*, actor: str, owner: str, data: ProposalActionIn, **_):
    text = _clean_comment(data)
    p = owner_proposal(owner)
    _require_own_active(p)
    if owner != actor:
        # до send черновик другой стороне не виден
        _require_sent(p)
    p.comments.append(ProposalComment(author=actor, comment=text))
    return {}

DUEL_HANDLERS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "activate": duel_activate,
    "deactivate": duel_deactivate,
    "update_schedule": duel_update_schedule,
    "update_day_comments": duel_update_day_comments,
    "copy_from_confirmed": duel_copy_from_confirmed,
    "copy_from_other": duel_copy_from_other,
    "send": duel_send,
    "respond": duel_respond,
    "accept": duel_accept,
    "add_comment": duel_add_comment,
}


# ---------- фасад ----------
def apply_action(policy: ConsentPolicy, data: ProposalActionIn, *, actor: str) -> Dict[str, Any]:
    if data.action not in policy.actions:
        raise ProposalValidationError("Unknown action")
    if policy.per_owner:
        owner = check_duel_access(data.action, data.owner, actor)
        return DUEL_HANDLERS[data.action](actor=actor, owner=owner, data=data, policy=policy)
    return SHARED_HANDLERS[data.action](actor=actor, data=data, policy=policy)


# ---------- чтение ----------
def consent_status(p: Optional[Proposal], party: str) -> Optional[dict]:
    if p is None:
        return None
    other = other_party(party)
    return {
        "user_accepted": p.has_accepted(party),
        "other_accepted": p.has_accepted(other),
        "other_party": other,
        "last_updated_by_other": p.last_updated_by is not None and p.last_updated_by != party,
    }

def shared_state(party: str) -> dict:
    p = active_shared_proposal()
    return {
        "proposal": p.to_dict() if p else None,
        "comments": [c.to_dict() for c in p.comments] if p else [],
        "status": consent_status(p, party),
    }

def duel_state(party: str) -> dict:
    out = []
    for owner in PARTIES:
        p = owner_proposal(owner, create_missing=False)
        if p is None:
            out.append({"owner": owner, "is_active": False, "is_sent": False,
                        "schedule_data": None, "day_comments": None, "comments": []})
            continue
        row = p.to_dict(with_comments=True)
        # чужой черновик виден только после send
        if owner != party and not p.is_sent:
            row["schedule_data"] = None
            row["day_comments"] = None
            row["comments"] = []
        elif not p.is_active:
            row["schedule_data"] = None
            row["day_comments"] = None
        out.append(row)
    return {"proposals": out}

def draft_for_view(policy: ConsentPolicy, party: str) -> Optional[Proposal]:
    """Черновик, который показывается в режиме «предложение» для party."""
    if policy.per_owner:
        p = owner_proposal(party, create_missing=False)
        return p if p is not None and p.is_active else None
    return active_shared_proposal()
