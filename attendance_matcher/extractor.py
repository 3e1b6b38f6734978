"""
Embedding extractor interface.

Face detection and embedding are provided by an external model runtime
injected by the caller. The matcher never sees images.
"""

from typing import Any, List, Optional, Protocol, Sequence

import numpy as np

from .logging_config import get_logger
from .recognition.descriptors import DescriptorLike, as_descriptor
from .recognition.errors import EmptyQuery

logger = get_logger(__name__)


class EmbeddingExtractor(Protocol):
    """Face model adapter supplying descriptors for decoded images."""

    def detect(self, image: Any) -> Sequence[Any]:
        """Return detected face regions, empty when no face is found."""
        ...

    def embed(self, image: Any, face: Any) -> Optional[DescriptorLike]:
        """Return the descriptor for one detected face, or None."""
        ...


def extract_descriptors(extractor: EmbeddingExtractor, image: Any) -> List[np.ndarray]:
    """
    Extract descriptors for every face detected in an image.

    Faces the extractor cannot embed are skipped.

    Args:
        extractor: Injected face model adapter
        image: Decoded image or video frame

    Returns:
        Descriptors in detection order (empty if no face)

    Raises:
        EmptyQuery: If the extractor returns a zero-length descriptor
    """
    descriptors: List[np.ndarray] = []

    for face in extractor.detect(image):
        raw = extractor.embed(image, face)
        if raw is None:
            logger.debug('Extractor returned no descriptor for detected face')
            continue

        descriptor = as_descriptor(raw)
        if len(descriptor) == 0:
            raise EmptyQuery('Extractor returned an empty descriptor')

        descriptors.append(descriptor)

    return descriptors


def extract_descriptor(extractor: EmbeddingExtractor, image: Any) -> Optional[np.ndarray]:
    """
    Extract the descriptor of the first face in an image.

    Args:
        extractor: Injected face model adapter
        image: Decoded image or video frame

    Returns:
        Descriptor, or None when no face is found (never a zero vector)
    """
    descriptors = extract_descriptors(extractor, image)

    if not descriptors:
        logger.debug('No face found in image')
        return None

    return descriptors[0]
