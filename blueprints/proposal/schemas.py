from __future__ import annotations
from datetime import date as dt_date
from typing import List, Literal, Optional
from pydantic import BaseModel, field_validator

Party = Literal["Jennifer", "Klas"]

class ScheduleEntryIn(BaseModel):
    switch_date: dt_date
    parent_after: Party

class DayCommentIn(BaseModel):
    date: dt_date
    comment: str
    author: Optional[Party] = None

    @field_validator("comment")
    @classmethod
    def _non_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("comment_required")
        if len(v) > 2000:
            raise ValueError("too_long")
        return v.strip()

class ProposalActionIn(BaseModel):
    action: str
    # только для политики duel: чей черновик
    owner: Optional[Party] = None
    # None = поле не передано; [] = пустое расписание
    schedule_data: Optional[List[ScheduleEntryIn]] = None
    day_comments: Optional[List[DayCommentIn]] = None
    comment: Optional[str] = None
