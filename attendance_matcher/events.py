"""
Attendance event sending module.

Sends attendance marks to backend API.
"""

import requests

from .attendance import AttendanceListener, AttendanceMark
from .config import Config
from .logging_config import get_logger

logger = get_logger(__name__)


def send_attendance(mark: AttendanceMark, config: Config) -> bool:
    """
    Send attendance mark to backend.

    Args:
        mark: Attendance mark
        config: Service configuration

    Returns:
        True if mark sent successfully
    """
    url = f'{config.backend_url}/api/attendance'

    payload = {
        'studentId': mark.student_id,
        'courseId': mark.course_id,
        'date': mark.date,
        'status': 'present',
    }

    try:
        logger.info(f'📤 Sending attendance for student {mark.student_id} (course {mark.course_id})')

        response = requests.post(url, json=payload, timeout=config.request_timeout)

        if response.ok:
            logger.info('✅ Attendance sent successfully')
            return True

        logger.error(f'❌ Failed to send attendance: {response.status_code} {response.text}')
        return False

    except requests.exceptions.Timeout:
        logger.error(f'❌ Timeout sending attendance to {url}')
        return False
    except requests.exceptions.ConnectionError:
        logger.error(f'❌ Connection error sending attendance to {url}')
        return False
    except requests.exceptions.RequestException as e:
        logger.error(f'❌ Error sending attendance: {e}')
        return False


def backend_listener(config: Config) -> AttendanceListener:
    """
    Build an AttendanceMarker listener that posts marks to the backend.

    Args:
        config: Service configuration

    Returns:
        Listener callable
    """
    def _listener(mark: AttendanceMark) -> bool:
        return send_attendance(mark, config)

    return _listener
