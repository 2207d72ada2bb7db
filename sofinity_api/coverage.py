from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sofinity_api.templates import EVENT_NAMES

RECENT_EVENTS_LIMIT = 1000
SAMPLES_PER_TYPE = 3
MINIMUM_EVENT_TYPES = 3


def _parse_ts(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def event_coverage(events: List[Dict[str, Any]], now: Optional[datetime] = None, event_names: Optional[List[str]] = None) -> Dict[str, Any]:
    """Which of the OneMil event types showed up recently, with a few metadata samples.

    `events` are EventLogs rows ({event_name, metadata, timestamp}), any order.
    Rows whose timestamp can't be parsed are skipped.
    """
    now = now or datetime.now(timezone.utc)
    names = event_names or EVENT_NAMES
    week_ago = now - timedelta(days=7)
    day_ago = now - timedelta(days=1)

    counts_7d: Dict[str, int] = {n: 0 for n in names}
    counts_24h: Dict[str, int] = {n: 0 for n in names}
    samples: Dict[str, List[Any]] = {}

    for e in events:
        name = e.get("event_name")
        if name not in counts_7d:
            continue
        ts = _parse_ts(e.get("timestamp"))
        if ts is None or ts < week_ago:
            continue
        counts_7d[name] += 1
        if ts >= day_ago:
            counts_24h[name] += 1
        bucket = samples.setdefault(name, [])
        if len(bucket) < SAMPLES_PER_TYPE:
            bucket.append(e.get("metadata") or {})

    existing = [n for n in names if counts_7d[n] > 0]
    missing = [n for n in names if counts_7d[n] == 0]

    return {
        "event_counts_7_days": counts_7d,
        "event_counts_24_hours": counts_24h,
        "required_events_status": {
            "existing_events": existing,
            "missing_events": missing,
            "has_minimum_required": len(existing) >= MINIMUM_EVENT_TYPES,
        },
        "sample_metadata": samples,
    }
