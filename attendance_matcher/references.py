"""
Reference descriptor loading module.

Loads students' stored face descriptors from the backend and builds the
labeled descriptor sets a FaceMatcher is constructed from.
"""

import math
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .logging_config import get_logger
from .recognition.descriptors import LabeledDescriptorSet
from .recognition.errors import DimensionMismatch
from .recognition.matching import FaceMatcher
from .utils.cache import Snapshot, load_cache, save_cache
from .utils.timing import retry_with_backoff

logger = get_logger(__name__)


def fetch_students(config: Config) -> List[Dict[str, Any]]:
    """
    Fetch student rows with stored descriptors from backend.

    Args:
        config: Service configuration

    Returns:
        List of student dicts ({"id", "name", "face_descriptors"})

    Raises:
        requests.exceptions.RequestException: If every attempt fails
    """
    url = f'{config.backend_url}/api/students'

    def _get() -> List[Dict[str, Any]]:
        response = requests.get(url, timeout=config.request_timeout)
        response.raise_for_status()
        return response.json()

    return retry_with_backoff(
        _get,
        max_attempts=config.request_retries,
        retry_on=(requests.exceptions.RequestException,),
    )


def _convert_descriptor(raw: Any) -> Optional[List[float]]:
    """Convert one stored descriptor, or None if it is malformed."""
    if not raw or isinstance(raw, (str, bytes)):
        return None

    try:
        values = [float(v) for v in raw]
    except (TypeError, ValueError):
        return None

    if not all(math.isfinite(v) for v in values):
        return None

    return values


def build_snapshot(students: List[Dict[str, Any]]) -> Snapshot:
    """
    Convert student rows into a {label: descriptors} snapshot.

    Students without descriptors are skipped. Null, empty, non-numeric or
    non-finite descriptor entries are dropped; the remaining entries of
    the same student are kept.

    Args:
        students: Student rows from the backend

    Returns:
        Snapshot keyed by str(student id), in backend order
    """
    snapshot: Snapshot = {}

    for student in students:
        if not isinstance(student, dict):
            logger.warning(f'Malformed student row skipped: {student!r}')
            continue

        student_id = student.get('id')
        if student_id is None:
            logger.warning(f"Student row without id skipped: {student.get('name', 'Unknown')}")
            continue

        label = str(student_id)
        raw_descriptors = student.get('face_descriptors') or []
        if not isinstance(raw_descriptors, list):
            logger.warning(f'Student {label}: face_descriptors is not a list, skipping')
            continue

        descriptors = [
            descriptor
            for descriptor in map(_convert_descriptor, raw_descriptors)
            if descriptor is not None
        ]

        if len(descriptors) < len(raw_descriptors):
            logger.warning(
                f'Student {label}: skipped {len(raw_descriptors) - len(descriptors)} malformed descriptor(s)'
            )

        if not descriptors:
            logger.warning(f"Student {label} ({student.get('name', 'Unknown')}) has no face descriptors, skipping")
            continue

        if label in snapshot:
            snapshot[label].extend(descriptors)
        else:
            snapshot[label] = descriptors

    return snapshot


def build_reference_sets(snapshot: Snapshot) -> List[LabeledDescriptorSet]:
    """
    Build labeled descriptor sets from a snapshot.

    Identities whose descriptors disagree in length among themselves or
    with the first valid identity are skipped.

    Args:
        snapshot: Mapping of label to raw descriptor lists

    Returns:
        Labeled descriptor sets in snapshot order
    """
    reference_sets: List[LabeledDescriptorSet] = []
    dimension: Optional[int] = None

    for label, descriptors in snapshot.items():
        try:
            reference = LabeledDescriptorSet(label, descriptors)
        except (DimensionMismatch, ValueError) as e:
            logger.warning(f'Student {label} skipped: {e}')
            continue

        if dimension is None:
            dimension = reference.dimension
        elif reference.dimension != dimension:
            logger.warning(
                f'Student {label} skipped: descriptor length {reference.dimension}, '
                f'expected {dimension}'
            )
            continue

        reference_sets.append(reference)

    return reference_sets


def load_reference_sets(config: Config) -> List[LabeledDescriptorSet]:
    """
    Load reference descriptor sets, falling back to the local snapshot.

    Args:
        config: Service configuration

    Returns:
        Labeled descriptor sets

    Raises:
        requests.exceptions.RequestException: If the backend is unreachable
            and no cached snapshot exists
    """
    logger.info('Loading reference descriptors from backend...')

    try:
        students = fetch_students(config)
        logger.info(f'Fetched {len(students)} students from backend')

        snapshot = build_snapshot(students)
        if snapshot:
            save_cache(snapshot, config.cache_file)

    except requests.exceptions.RequestException as e:
        logger.error(f'Failed to fetch students from backend: {e}')

        snapshot, _ = load_cache(config.cache_file)
        if snapshot is None:
            raise

        logger.warning(f'Using cached reference snapshot for {len(snapshot)} students')

    reference_sets = build_reference_sets(snapshot)
    logger.info(f'✅ Loaded {len(reference_sets)} students with face descriptors')

    return reference_sets


def load_matcher(config: Config) -> FaceMatcher:
    """
    Load references and build a live-identification matcher.

    Args:
        config: Service configuration

    Returns:
        FaceMatcher using config.match_threshold
    """
    return FaceMatcher(load_reference_sets(config), threshold=config.match_threshold)
