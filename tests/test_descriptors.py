"""Tests for the descriptor data model."""

from __future__ import annotations

import numpy as np
import pytest

from attendance_matcher.recognition import DimensionMismatch, LabeledDescriptorSet, as_descriptor


def test_as_descriptor_copies_and_freezes() -> None:
    source = np.array([0.1, 0.2, 0.3], dtype=np.float32)

    descriptor = as_descriptor(source)
    source[0] = 9.0

    assert descriptor.dtype == np.float64
    assert descriptor[0] == pytest.approx(0.1)
    with pytest.raises(ValueError):
        descriptor[0] = 1.0


def test_as_descriptor_rejects_matrix() -> None:
    with pytest.raises(ValueError):
        as_descriptor([[0.1, 0.2], [0.3, 0.4]])


def test_labeled_set_keeps_every_descriptor() -> None:
    reference = LabeledDescriptorSet(42, [[0.0, 1.0], [1.0, 0.0], [0.5, 0.5]])

    assert reference.label == '42'
    assert len(reference) == 3
    assert reference.dimension == 2
    assert reference.matrix.shape == (3, 2)


def test_labeled_set_requires_descriptors() -> None:
    with pytest.raises(ValueError):
        LabeledDescriptorSet('S1', [])


def test_labeled_set_rejects_empty_descriptor() -> None:
    with pytest.raises(ValueError):
        LabeledDescriptorSet('S1', [[]])


def test_labeled_set_rejects_mixed_lengths() -> None:
    with pytest.raises(DimensionMismatch) as excinfo:
        LabeledDescriptorSet('S1', [[0.0, 1.0], [1.0, 0.0, 0.0]])

    assert excinfo.value.label == 'S1'
