"""
Face matching package.

Contains modules for:
- Descriptor data model
- Distance computation and identity matching
- Matcher errors
"""

from .descriptors import LabeledDescriptorSet, as_descriptor
from .errors import DimensionMismatch, EmptyQuery, MatcherError, NonFiniteQuery
from .matching import (
    DEFAULT_MATCH_THRESHOLD,
    UNKNOWN_LABEL,
    FaceMatcher,
    MatchResult,
    euclidean_distance,
    similarity_from_distance,
    validate_query,
)

__all__ = [
    'LabeledDescriptorSet',
    'as_descriptor',
    'DimensionMismatch',
    'EmptyQuery',
    'MatcherError',
    'NonFiniteQuery',
    'DEFAULT_MATCH_THRESHOLD',
    'UNKNOWN_LABEL',
    'FaceMatcher',
    'MatchResult',
    'euclidean_distance',
    'similarity_from_distance',
    'validate_query',
]
