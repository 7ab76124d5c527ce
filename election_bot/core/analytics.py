"""Fire-and-forget usage events.

Events are written as JSON lines to the ``election_bot.analytics`` logger
and the most recent ones are kept in memory for inspection.
"""

import json
import logging
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

logger = logging.getLogger("election_bot.analytics")


@dataclass
class AnalyticsEvent:
    event_name: str
    properties: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0
    session_id: Optional[str] = None


class AnalyticsTracker:
    """Bounded in-memory event log backed by the logging system."""

    def __init__(self, max_events: int = 100):
        self._events: deque[AnalyticsEvent] = deque(maxlen=max_events)

    def track(self, event_name: str, session_id: Optional[str] = None, **properties: Any) -> AnalyticsEvent:
        event = AnalyticsEvent(
            event_name=event_name,
            properties=properties,
            timestamp=int(time.time() * 1000),
            session_id=session_id,
        )
        self._events.append(event)
        logger.info(json.dumps(asdict(event), default=str, ensure_ascii=False))
        return event

    def recent(self, event_name: Optional[str] = None) -> list[AnalyticsEvent]:
        if event_name is None:
            return list(self._events)
        return [e for e in self._events if e.event_name == event_name]
