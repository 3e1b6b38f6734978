"""
Attendance marking module.

Turns positive match results into attendance marks:
- One mark per student per course per (UTC) day
- Registered listeners are notified of each new mark
- A mark a listener fails to record is forgotten, so the next match retries
"""

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .extractor import EmbeddingExtractor, extract_descriptors
from .logging_config import get_logger
from .recognition.matching import FaceMatcher, MatchResult, UNKNOWN_LABEL

logger = get_logger(__name__)


def utc_date(timestamp: float) -> str:
    """UTC calendar date of a timestamp (YYYY-MM-DD)."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


@dataclass(frozen=True)
class AttendanceMark:
    """A student recorded as present."""

    student_id: str
    course_id: str
    timestamp: float
    similarity: float

    @property
    def date(self) -> str:
        return utc_date(self.timestamp)


# Returning False (or raising) reports that the mark was not recorded.
AttendanceListener = Callable[[AttendanceMark], Any]


class AttendanceMarker:
    """
    Records attendance from match results.

    Repeated matches of the same student for the same course on the same
    day are ignored, so callers can feed every match result from a
    polling loop.
    """

    def __init__(
        self,
        listeners: Optional[List[AttendanceListener]] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize attendance marker.

        Args:
            listeners: Callbacks invoked with every new AttendanceMark
            clock: Time source (seconds since epoch)
        """
        self.listeners: List[AttendanceListener] = list(listeners or [])
        self._clock = clock
        # (student, course) -> date of the last recorded mark
        self._marked: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def add_listener(self, listener: AttendanceListener) -> None:
        """
        Register a callback for new attendance marks.

        Args:
            listener: Callable receiving an AttendanceMark
        """
        self.listeners.append(listener)

    def observe(self, result: MatchResult, course_id: Optional[Any]) -> Optional[AttendanceMark]:
        """
        Record attendance for a match result.

        Args:
            result: Output of FaceMatcher
            course_id: Course the attendance belongs to; nothing is
                recorded without one

        Returns:
            New AttendanceMark, or None if nothing was recorded (no match,
            no course, already marked today, or a listener failed)
        """
        if course_id is None:
            logger.debug('No course selected, attendance not recorded')
            return None

        if not result.is_match or result.label == UNKNOWN_LABEL:
            return None

        mark = AttendanceMark(
            student_id=result.label,
            course_id=str(course_id),
            timestamp=self._clock(),
            similarity=result.similarity,
        )
        key = (mark.student_id, mark.course_id)

        with self._lock:
            if self._marked.get(key) == mark.date:
                logger.debug(
                    f'Student {mark.student_id} already marked for course {mark.course_id} on {mark.date}'
                )
                return None
            self._marked[key] = mark.date

        if not self._notify(mark):
            with self._lock:
                if self._marked.get(key) == mark.date:
                    del self._marked[key]
            logger.warning(
                f'Attendance for student {mark.student_id} not recorded, will retry on next match'
            )
            return None

        logger.info(
            f'✅ Student {mark.student_id} marked present for course {mark.course_id} '
            f'(similarity {result.similarity_percent:.0f}%)'
        )
        return mark

    def reset(self) -> None:
        """Forget all recorded marks."""
        with self._lock:
            self._marked.clear()

    def _notify(self, mark: AttendanceMark) -> bool:
        """Call every listener; False if any of them failed."""
        recorded = True

        for listener in list(self.listeners):
            try:
                if listener(mark) is False:
                    recorded = False
            except Exception as e:
                logger.error(f'Attendance listener failed for student {mark.student_id}: {e}')
                recorded = False

        return recorded


def scan_image(
    image: Any,
    extractor: EmbeddingExtractor,
    matcher: FaceMatcher,
    marker: AttendanceMarker,
    course_id: Any
) -> List[MatchResult]:
    """
    Match every face in one image and record attendance for matches.

    Args:
        image: Decoded image or video frame
        extractor: Injected face model adapter
        matcher: Matcher built from the current reference snapshot
        marker: Attendance marker
        course_id: Course the attendance belongs to

    Returns:
        Match results in detection order
    """
    results = matcher.match_all(extract_descriptors(extractor, image))

    for result in results:
        marker.observe(result, course_id)

    return results
