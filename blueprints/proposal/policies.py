# blueprints/proposal/policies.py
from __future__ import annotations
from dataclasses import dataclass

from flask import current_app

SHARED_ACTIONS = frozenset({
    "create", "update_schedule", "update_day_comments", "add_comment", "accept", "delete",
})
# действия над СВОИМ черновиком (owner == текущий пользователь)
OWNER_ONLY_ACTIONS = frozenset({
    "activate", "deactivate", "update_schedule", "update_day_comments",
    "copy_from_confirmed", "copy_from_other", "send",
})
# действия над черновиком ДРУГОЙ стороны
OTHER_ONLY_ACTIONS = frozenset({"respond", "accept"})
DUEL_ACTIONS = OWNER_ONLY_ACTIONS | OTHER_ONLY_ACTIONS | {"add_comment"}

@dataclass(frozen=True)
class ConsentPolicy:
    """Как черновик становится подтверждённым расписанием."""
    name: str
    per_owner: bool           # по черновику на сторону вместо одного общего
    approvals_required: int   # сколько сторон должны принять
    actions: frozenset

    @property
    def shared(self) -> bool:
        return not self.per_owner

SINGLE = ConsentPolicy("single", per_owner=False, approvals_required=1, actions=SHARED_ACTIONS)
BILATERAL = ConsentPolicy("bilateral", per_owner=False, approvals_required=2, actions=SHARED_ACTIONS)
DUEL = ConsentPolicy("duel", per_owner=True, approvals_required=1, actions=DUEL_ACTIONS)

POLICIES = {p.name: p for p in (SINGLE, BILATERAL, DUEL)}

def get_policy(name: str) -> ConsentPolicy:
    try:
        return POLICIES[(name or "").strip().lower()]
    except KeyError:
        raise ValueError(f"unknown consent policy: {name!r}") from None

def current_policy() -> ConsentPolicy:
    return get_policy(current_app.config.get("CONSENT_POLICY", "bilateral"))
