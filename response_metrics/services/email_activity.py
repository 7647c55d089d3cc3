"""
Tracked email processing.

Works on individual tracked emails rather than the daily metrics table:

- rows_from_tracked_emails folds answered inbound emails into MetricRows per
  (received date, employee) so live email data goes through the same
  aggregator as the daily feed.
- build_unanswered lists inbound emails still waiting for a first response,
  with how long they have waited and whether the SLA is already breached.

An email counts as an SLA breach when its first response took strictly more
than the SLA target.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from response_metrics.models.enums import SlaStatus
from response_metrics.models.schemas import MetricRow, TrackedEmail, UnansweredEmail


logger = logging.getLogger(__name__)


SLA_TARGET_MINUTES: int = 15

NO_SUBJECT: str = "(No subject)"


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to a naive timestamp; naive feed timestamps are UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded half-up."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return int(seconds // 60 + (1 if seconds % 60 >= 30 else 0))


def response_minutes(email: TrackedEmail) -> Optional[float]:
    """
    First-response latency of an answered email.

    Uses responseTimeMinutes when the feed provides it, otherwise the minutes
    between receivedAt and firstResponseAt. None if neither is available.
    """
    if email.responseTimeMinutes is not None:
        return float(email.responseTimeMinutes)
    if email.firstResponseAt is not None:
        return float(minutes_between(email.receivedAt, email.firstResponseAt))
    return None


@dataclass
class _DayStats:
    total: int = 0
    breaches: int = 0
    sum_minutes: float = 0.0


def rows_from_tracked_emails(
    emails: Iterable[TrackedEmail],
    sla_target: int = SLA_TARGET_MINUTES
) -> List[MetricRow]:
    """
    Fold answered emails into daily metric rows.

    Args:
        emails: Tracked inbound emails. Unanswered emails, emails without an
            assigned employee and emails with no measurable latency are
            skipped.
        sla_target: Breach threshold in minutes.

    Returns:
        MetricRows ordered by (date, employeeId).
    """
    stats: Dict[Tuple[date, str], _DayStats] = {}
    skipped = 0

    for email in emails:
        minutes = response_minutes(email) if email.hasResponse else None
        if not email.employeeEmail or minutes is None:
            skipped += 1
            continue

        day = as_utc(email.receivedAt).date()
        entry = stats.setdefault((day, email.employeeEmail), _DayStats())
        entry.total += 1
        entry.sum_minutes += minutes
        if minutes > sla_target:
            entry.breaches += 1

    if skipped:
        logger.debug(f"Skipped {skipped} tracked emails without employee or latency")

    return [
        MetricRow(
            date=day,
            employeeId=employee_id,
            responseCount=entry.total,
            avgResponseMinutes=entry.sum_minutes / entry.total,
            breachCount=entry.breaches,
        )
        for (day, employee_id), entry in sorted(stats.items())
    ]


def outlook_link(graph_message_id: Optional[str], base: str) -> Optional[str]:
    """Outlook web deep link for a Graph message id, or None."""
    if not graph_message_id:
        return None
    return f"{base}{graph_message_id}"


def build_unanswered(
    emails: Iterable[TrackedEmail],
    now: datetime,
    sla_target: int = SLA_TARGET_MINUTES,
    deeplink_base: str = "https://outlook.office.com/mail/deeplink/read/",
    limit: Optional[int] = None
) -> List[UnansweredEmail]:
    """
    Unanswered inbound emails, oldest first.

    Args:
        emails: Tracked emails; answered ones are ignored.
        now: Reference time for minutes unanswered.
        sla_target: Breach threshold in minutes.
        deeplink_base: Prefix for the Outlook link.
        limit: Maximum number of emails returned.

    Returns:
        UnansweredEmail entries sorted by receivedAt ascending.
    """
    pending = sorted(
        (email for email in emails if not email.hasResponse),
        key=lambda email: as_utc(email.receivedAt),
    )
    if limit is not None:
        pending = pending[:limit]

    result = []
    for email in pending:
        minutes = max(0, minutes_between(email.receivedAt, now))
        result.append(UnansweredEmail(
            id=email.id,
            clientEmail=email.clientEmail,
            subject=email.subject or NO_SUBJECT,
            employeeEmail=email.employeeEmail,
            receivedAt=email.receivedAt,
            minutesUnanswered=minutes,
            slaStatus=SlaStatus.BREACHED if minutes > sla_target else SlaStatus.OK,
            outlookLink=outlook_link(email.graphMessageId, deeplink_base),
        ))
    return result
