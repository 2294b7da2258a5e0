from .user import User
from .schedule import ScheduleEntry, DayComment
from .proposal import Proposal, ProposalEntry, ProposalDayComment, ProposalComment, utcnow

__all__ = [
    "User",
    "ScheduleEntry", "DayComment",
    "Proposal", "ProposalEntry", "ProposalDayComment", "ProposalComment",
    "utcnow",
]
