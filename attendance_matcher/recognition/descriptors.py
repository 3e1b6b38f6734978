"""
Face descriptor data model.

A descriptor is the fixed-length embedding produced by an external face
model. Descriptors carry no identity of their own; a LabeledDescriptorSet
binds one or more of them to a student label.
"""

from dataclasses import dataclass, field
from typing import Iterable, Sequence, Tuple, Union

import numpy as np

from .errors import DimensionMismatch

DescriptorLike = Union[np.ndarray, Sequence[float]]


def as_descriptor(values: DescriptorLike) -> np.ndarray:
    """
    Convert a sequence of numbers into an immutable descriptor.

    Args:
        values: List, tuple or array of floats (e.g. a JSON-decoded
            Float32Array)

    Returns:
        Read-only 1-D float64 array

    Raises:
        ValueError: If values are not one-dimensional
    """
    descriptor = np.array(values, dtype=np.float64)

    if descriptor.ndim != 1:
        raise ValueError(
            f'Descriptor must be one-dimensional, got shape {descriptor.shape}'
        )

    descriptor.flags.writeable = False
    return descriptor


@dataclass(frozen=True, eq=False)
class LabeledDescriptorSet:
    """
    One identity's stored descriptors.

    Multiple descriptors (different angles or sessions) are all evaluated
    during matching; the closest one represents the identity.
    """

    label: str
    descriptors: Tuple[np.ndarray, ...]
    matrix: np.ndarray = field(init=False, repr=False, compare=False)

    def __init__(self, label: str, descriptors: Iterable[DescriptorLike]):
        converted = tuple(as_descriptor(d) for d in descriptors)

        if not converted:
            raise ValueError(f'Identity {label} has no descriptors')

        dimension = len(converted[0])
        if dimension == 0:
            raise ValueError(f'Identity {label} has an empty descriptor')

        for descriptor in converted[1:]:
            if len(descriptor) != dimension:
                raise DimensionMismatch(dimension, len(descriptor), label=str(label))

        matrix = np.stack(converted)
        if not np.all(np.isfinite(matrix)):
            raise ValueError(f'Identity {label} has non-finite descriptor values')
        matrix.flags.writeable = False

        object.__setattr__(self, 'label', str(label))
        object.__setattr__(self, 'descriptors', converted)
        object.__setattr__(self, 'matrix', matrix)

    @property
    def dimension(self) -> int:
        """Length shared by every descriptor in the set."""
        return int(self.matrix.shape[1])

    def __len__(self) -> int:
        return len(self.descriptors)
