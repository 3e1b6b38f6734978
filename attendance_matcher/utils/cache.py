"""
Reference snapshot cache module.

Keeps the last reference descriptor snapshot on disk so the service can
start when the backend is unreachable.
"""

import hashlib
import os
import pickle
import time
from typing import Dict, List, Optional, Tuple

from ..logging_config import get_logger

logger = get_logger(__name__)

# label -> list of raw descriptors
Snapshot = Dict[str, List[List[float]]]


def get_snapshot_hash(snapshot: Snapshot) -> str:
    """
    Compute hash of a reference snapshot for change detection.

    Args:
        snapshot: Mapping of label to raw descriptor lists

    Returns:
        MD5 hash string
    """
    digest = hashlib.md5()
    for label, descriptors in snapshot.items():
        digest.update(label.encode())
        for descriptor in descriptors:
            digest.update(','.join(repr(float(v)) for v in descriptor).encode())
            digest.update(b';')
        digest.update(b'|')
    return digest.hexdigest()


def save_cache(snapshot: Snapshot, cache_file: str) -> None:
    """
    Save reference snapshot to file.

    Skips writing when the cached snapshot already has the same hash.

    Args:
        snapshot: Mapping of label to raw descriptor lists
        cache_file: Path to cache file
    """
    snapshot_hash = get_snapshot_hash(snapshot)

    _, cached_hash = load_cache(cache_file)
    if cached_hash == snapshot_hash:
        logger.debug('Reference snapshot unchanged, cache not rewritten')
        return

    try:
        cache_data = {
            'snapshot': snapshot,
            'hash': snapshot_hash,
            'timestamp': time.time(),
        }

        with open(cache_file, 'wb') as f:
            pickle.dump(cache_data, f)

        logger.info(f'Cache saved for {len(snapshot)} students')

    except OSError as e:
        logger.error(f'Failed to save cache: {e}')


def load_cache(cache_file: str) -> Tuple[Optional[Snapshot], Optional[str]]:
    """
    Load reference snapshot from file.

    Args:
        cache_file: Path to cache file

    Returns:
        Tuple of (snapshot, hash) or (None, None) if cache is missing or invalid
    """
    if not os.path.exists(cache_file):
        logger.debug('Cache file not found')
        return None, None

    try:
        with open(cache_file, 'rb') as f:
            cache_data = pickle.load(f)

        age = time.time() - cache_data.get('timestamp', 0)
        logger.info(f'Cache found (age: {age:.0f} seconds)')

        return cache_data.get('snapshot'), cache_data.get('hash')

    except (OSError, pickle.UnpicklingError, EOFError, AttributeError) as e:
        logger.error(f'Failed to load cache: {e}')
        return None, None
