from datetime import date as dt_date

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from extensions import db


class ScheduleEntry(db.Model):
    """Подтверждённая дата передачи: с switch_date ребёнок у parent_after."""
    __tablename__ = "schedule"

    id: Mapped[int] = mapped_column(primary_key=True)
    switch_date: Mapped[dt_date] = mapped_column(Date, nullable=False, unique=True, index=True)
    parent_after: Mapped[str] = mapped_column(String(64), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "switch_date": self.switch_date.isoformat(),
            "parent_after": self.parent_after,
        }

    def __repr__(self):
        return f"<ScheduleEntry {self.switch_date} -> {self.parent_after}>"


class DayComment(db.Model):
    __tablename__ = "day_comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False, unique=True, index=True)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(64), nullable=False)

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "comment": self.comment, "author": self.author}
