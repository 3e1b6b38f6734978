"""
Descriptor matching module.

Matches a live face descriptor against students' stored descriptors using
Euclidean distance.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from ..logging_config import get_logger
from .descriptors import DescriptorLike, LabeledDescriptorSet, as_descriptor
from .errors import DimensionMismatch, EmptyQuery, NonFiniteQuery

logger = get_logger(__name__)

UNKNOWN_LABEL = 'unknown'
REFERENCE_LABEL = 'reference'
DEFAULT_MATCH_THRESHOLD = 0.5


def euclidean_distance(a: DescriptorLike, b: DescriptorLike) -> float:
    """
    Compute the L2 distance between two descriptors.

    Args:
        a: First descriptor
        b: Second descriptor

    Returns:
        Non-negative distance

    Raises:
        DimensionMismatch: If the descriptors differ in length
    """
    a = as_descriptor(a)
    b = as_descriptor(b)

    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    return float(np.linalg.norm(a - b))


def validate_query(query: DescriptorLike) -> np.ndarray:
    """
    Convert a query descriptor and reject degenerate input.

    Raises:
        EmptyQuery: If the query has zero length
        NonFiniteQuery: If the query contains NaN or infinity
    """
    query = as_descriptor(query)

    if len(query) == 0:
        raise EmptyQuery()
    if not np.all(np.isfinite(query)):
        raise NonFiniteQuery()

    return query


def similarity_from_distance(distance: float) -> float:
    """
    Convert a distance into a confidence in [0, 1].

    similarity = 1 - distance, clamped.
    """
    return float(min(1.0, max(0.0, 1.0 - distance)))


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of a descriptor comparison.

    Attributes:
        label: Matching identity, or UNKNOWN_LABEL
        distance: Euclidean distance to the closest candidate
            (math.inf when nothing was compared)
        similarity: 1 - distance clamped to [0, 1]
        is_match: True when distance is strictly below the threshold
    """

    label: str
    distance: float
    similarity: float
    is_match: bool

    @property
    def similarity_percent(self) -> float:
        return self.similarity * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'distance': self.distance if math.isfinite(self.distance) else None,
            'similarity': self.similarity,
            'isMatch': self.is_match,
        }

    def __str__(self) -> str:
        return f'{self.label} ({self.distance:.2f})'


class FaceMatcher:
    """
    Matches query descriptors against a snapshot of labeled references.

    The reference snapshot is immutable after construction, so a single
    instance can serve concurrent calls without locking. Build a new
    matcher when references change.
    """

    def __init__(
        self,
        reference_sets: Iterable[LabeledDescriptorSet] = (),
        threshold: float = DEFAULT_MATCH_THRESHOLD
    ):
        """
        Initialize matcher.

        Args:
            reference_sets: Labeled descriptor sets, in priority order for ties
            threshold: Maximum distance (exclusive) accepted as a match

        Raises:
            DimensionMismatch: If reference descriptors differ in length
            ValueError: If threshold is not a positive number
        """
        threshold = float(threshold)
        if math.isnan(threshold) or threshold <= 0:
            raise ValueError(f'Threshold must be a positive number, got {threshold}')

        self._threshold = threshold
        self._references: Tuple[LabeledDescriptorSet, ...] = tuple(reference_sets)
        self._dimension: Optional[int] = None

        for reference in self._references:
            if self._dimension is None:
                self._dimension = reference.dimension
            elif reference.dimension != self._dimension:
                raise DimensionMismatch(
                    self._dimension, reference.dimension, label=reference.label
                )

        logger.debug(
            f'FaceMatcher built with {len(self._references)} identities '
            f'(threshold={self._threshold})'
        )

    @classmethod
    def from_mapping(
        cls,
        references: Mapping[Any, Iterable[DescriptorLike]],
        threshold: float = DEFAULT_MATCH_THRESHOLD
    ) -> 'FaceMatcher':
        """Build a matcher from {label: [descriptor, ...]}."""
        return cls(
            [LabeledDescriptorSet(label, descriptors) for label, descriptors in references.items()],
            threshold=threshold,
        )

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def dimension(self) -> Optional[int]:
        """Shared descriptor length, or None for an empty reference set."""
        return self._dimension

    @property
    def labels(self) -> List[str]:
        return [reference.label for reference in self._references]

    def __len__(self) -> int:
        return len(self._references)

    def find_best_match(self, query: DescriptorLike) -> MatchResult:
        """
        Find the identity closest to the query descriptor.

        Each identity is represented by its closest stored descriptor.
        Ties go to the identity that appears first in the reference set.

        Args:
            query: Live face descriptor

        Returns:
            MatchResult labeled with the winner, or UNKNOWN_LABEL when the
            reference set is empty or the best distance is not below the
            threshold

        Raises:
            EmptyQuery: If the query has zero length
            NonFiniteQuery: If the query contains NaN or infinity
            DimensionMismatch: If the query length differs from the references
        """
        best_label: Optional[str] = None
        best_distance = math.inf

        for label, distance in self._representative_distances(query):
            if distance < best_distance:
                best_label = label
                best_distance = distance

        if best_label is None or not self._accepts(best_distance):
            return self._result(UNKNOWN_LABEL, best_distance, False)

        return self._result(best_label, best_distance, True)

    def compare_single(
        self,
        a: DescriptorLike,
        b: DescriptorLike,
        label: str = REFERENCE_LABEL
    ) -> MatchResult:
        """
        Compare a query descriptor against one reference descriptor.

        Uses this matcher's threshold and the same matching path as
        find_best_match.

        Args:
            a: Query descriptor (e.g. live capture)
            b: Reference descriptor (e.g. stored photo)
            label: Label reported on a positive result

        Returns:
            MatchResult for the pair
        """
        a = validate_query(a)
        b = as_descriptor(b)

        if len(a) != len(b):
            raise DimensionMismatch(len(b), len(a), label=label)

        single = FaceMatcher([LabeledDescriptorSet(label, [b])], threshold=self._threshold)
        return single.find_best_match(a)

    def match_all(self, queries: Iterable[DescriptorLike]) -> List[MatchResult]:
        """Find the best match for every descriptor detected in one frame."""
        return [self.find_best_match(query) for query in queries]

    def rank(self, query: DescriptorLike, top_k: Optional[int] = None) -> List[MatchResult]:
        """
        Rank identities by representative distance.

        Args:
            query: Live face descriptor
            top_k: Limit number of results (all identities when None)

        Returns:
            One MatchResult per comparable identity, closest first;
            equal distances keep reference order
        """
        if top_k is not None and top_k < 0:
            raise ValueError(f'top_k must be non-negative, got {top_k}')

        ranked = sorted(
            self._representative_distances(query),
            key=lambda item: item[1]
        )

        if top_k is not None:
            ranked = ranked[:top_k]

        return [
            self._result(label, distance, self._accepts(distance))
            for label, distance in ranked
        ]

    def _accepts(self, distance: float) -> bool:
        return distance < self._threshold

    def _result(self, label: str, distance: float, is_match: bool) -> MatchResult:
        return MatchResult(
            label=label,
            distance=distance,
            similarity=similarity_from_distance(distance),
            is_match=is_match,
        )

    def _check_query(self, query: DescriptorLike) -> np.ndarray:
        query = validate_query(query)

        if self._dimension is not None and len(query) != self._dimension:
            raise DimensionMismatch(self._dimension, len(query))

        return query

    def _representative_distances(self, query: DescriptorLike) -> Iterator[Tuple[str, float]]:
        """Yield (label, min distance) for each identity, in reference order."""
        query = self._check_query(query)

        for reference in self._references:
            distances = np.linalg.norm(reference.matrix - query, axis=1)
            yield reference.label, float(distances.min())
