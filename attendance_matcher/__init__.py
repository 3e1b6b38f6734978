"""
Attendance Matcher - Face Descriptor Matching for Attendance

Matches live face descriptors against students' stored descriptors and
records attendance for confident matches.
"""

from .recognition import (
    DimensionMismatch,
    EmptyQuery,
    FaceMatcher,
    LabeledDescriptorSet,
    MatchResult,
    MatcherError,
    UNKNOWN_LABEL,
    euclidean_distance,
)

__version__ = "1.0.0"

__all__ = [
    'DimensionMismatch',
    'EmptyQuery',
    'FaceMatcher',
    'LabeledDescriptorSet',
    'MatchResult',
    'MatcherError',
    'UNKNOWN_LABEL',
    'euclidean_distance',
]
