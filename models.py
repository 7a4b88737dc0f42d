"""
Data models for work-log entries, time windows and aggregated results.
"""
from datetime import datetime
from typing import Optional, Dict, Any

MINUTE = 60
HOUR = 60 * MINUTE


class UserInfo:
    """
    A Jira account as returned by /myself or /user/search.
    """
    def __init__(self, account_id: str, email_address: str = '', display_name: str = '', time_zone: str = ''):
        self.account_id = account_id
        self.email_address = email_address
        self.display_name = display_name
        self.time_zone = time_zone

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> 'UserInfo':
        return cls(
            account_id=raw.get('accountId') or '',
            email_address=raw.get('emailAddress') or '',
            display_name=raw.get('displayName') or '',
            time_zone=raw.get('timeZone') or '',
        )

    def to_dict(self) -> Dict[str, str]:
        # accountId is never part of printed output
        return {'emailAddress': self.email_address, 'displayName': self.display_name, 'timeZone': self.time_zone}


class TimeWindow:
    """
    Half-open interval [start, end) of absolute instants. Either bound may be None (open).
    """
    def __init__(self, start: Optional[datetime] = None, end: Optional[datetime] = None):
        for name, bound in (('start', start), ('end', end)):
            if bound is not None and bound.tzinfo is None:
                raise ValueError(f"TimeWindow {name} must be timezone-aware")
        self.start = start
        self.end = end

    def contains(self, instant: datetime) -> bool:
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant >= self.end:
            return False
        return True

    def __repr__(self):
        return f"TimeWindow(start={self.start!r}, end={self.end!r})"


class WorklogEntry:
    """
    A single work-log record attached to an issue.
    """
    def __init__(self, author_id: str, started: datetime, seconds: int):
        self.author_id = author_id
        self.started = started
        self.seconds = seconds


class PerIssueTotal:
    def __init__(self, issue_id: str, seconds: int):
        self.issue_id = issue_id
        self.seconds = seconds

    def __repr__(self):
        return f"PerIssueTotal({self.issue_id!r}, {self.seconds})"


class AggregateResult:
    """
    Grand total over every PerIssueTotal seen before the result queue closed.
    """
    def __init__(self, total_seconds: int = 0, issues: int = 0):
        self.total_seconds = total_seconds
        self.issues = issues

    def add(self, item: PerIssueTotal):
        self.total_seconds += item.seconds
        self.issues += 1


class Results:
    """
    Report for one user: echoed window dates plus the total split into hours/minutes/seconds.
    """
    def __init__(self, user: UserInfo, total_seconds: int, start: str = '', end: str = ''):
        self.user = user
        self.start = start
        self.end = end
        self.total_seconds = total_seconds
        self.hours = total_seconds // HOUR
        self.minutes = (total_seconds % HOUR) // MINUTE
        self.seconds = total_seconds % MINUTE

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'user': self.user.to_dict()}
        if self.start:
            out['start'] = self.start
        if self.end:
            out['end'] = self.end
        out.update({'hours': self.hours, 'minutes': self.minutes, 'seconds': self.seconds, 'totalSeconds': self.total_seconds})
        return out

    def __str__(self):
        return f"{self.user.display_name}: {self.hours}h {self.minutes}m ({self.start or '-'} to {self.end or '-'})"
