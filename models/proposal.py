from __future__ import annotations
from datetime import date as dt_date, datetime, UTC

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db


def utcnow() -> datetime:
    # храним naive UTC, как и остальные DateTime-колонки
    return datetime.now(UTC).replace(tzinfo=None)


class Proposal(db.Model):
    """
    Черновик нового расписания.
    owner = None:  общий черновик (политики single/bilateral), активен максимум один;
    owner = имя:   личный черновик стороны (политика duel), по одной строке на сторону.
    """
    __tablename__ = "proposals"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(64))
    last_updated_by: Mapped[str | None] = mapped_column(String(64))
    jennifer_accepted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    klas_accepted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    entries = relationship(
        "ProposalEntry", order_by="ProposalEntry.position",
        back_populates="proposal", cascade="all, delete-orphan",
    )
    day_comments = relationship(
        "ProposalDayComment", order_by="ProposalDayComment.position",
        back_populates="proposal", cascade="all, delete-orphan",
    )
    comments = relationship(
        "ProposalComment", order_by=lambda: [ProposalComment.created_at, ProposalComment.id],
        back_populates="proposal", cascade="all, delete-orphan",
    )

    @property
    def schedule_data(self) -> list[dict]:
        return [e.to_dict() for e in self.entries]

    @property
    def day_comment_data(self) -> list[dict]:
        return [c.to_dict() for c in self.day_comments]

    def has_accepted(self, party: str) -> bool:
        return bool(self.jennifer_accepted if party == "Jennifer" else self.klas_accepted)

    def to_dict(self, with_comments: bool = False) -> dict:
        out = {
            "id": self.id,
            "owner": self.owner,
            "is_active": bool(self.is_active),
            "is_sent": bool(self.is_sent),
            "schedule_data": self.schedule_data,
            "day_comments": self.day_comment_data,
            "created_by": self.created_by,
            "last_updated_by": self.last_updated_by,
            "jennifer_accepted": bool(self.jennifer_accepted),
            "klas_accepted": bool(self.klas_accepted),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if with_comments:
            out["comments"] = [c.to_dict() for c in self.comments]
        return out

    def __repr__(self):
        return f"<Proposal {self.id} owner={self.owner} active={self.is_active}>"


class ProposalEntry(db.Model):
    __tablename__ = "proposal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False)
    # порядок, в котором клиент прислал записи; дубли дат допускаются
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    switch_date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    parent_after: Mapped[str] = mapped_column(String(64), nullable=False)

    proposal = relationship("Proposal", back_populates="entries")

    __table_args__ = (
        Index("ix_proposal_entries_proposal_position", "proposal_id", "position"),
    )

    def to_dict(self) -> dict:
        return {"switch_date": self.switch_date.isoformat(), "parent_after": self.parent_after}


class ProposalDayComment(db.Model):
    __tablename__ = "proposal_day_comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(64), nullable=False)

    proposal = relationship("Proposal", back_populates="day_comments")

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "comment": self.comment, "author": self.author}


class ProposalComment(db.Model):
    __tablename__ = "proposal_comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(64), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    proposal = relationship("Proposal", back_populates="comments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author": self.author,
            "comment": self.comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
