"""Tests for the embedding extractor helpers."""

from __future__ import annotations

import numpy as np
import pytest

from attendance_matcher.extractor import extract_descriptor, extract_descriptors
from attendance_matcher.recognition import EmptyQuery


class FakeExtractor:
    def __init__(self, faces):
        self.faces = faces

    def detect(self, image):
        return list(range(len(self.faces)))

    def embed(self, image, face):
        return self.faces[face]


def test_no_face_returns_none() -> None:
    assert extract_descriptor(FakeExtractor([]), image=object()) is None


def test_unembeddable_face_is_skipped() -> None:
    descriptor = extract_descriptor(FakeExtractor([None, [0.0, 0.0, 1.0]]), image=object())

    assert descriptor.tolist() == [0.0, 0.0, 1.0]


def test_zero_vector_is_a_real_descriptor() -> None:
    descriptor = extract_descriptor(FakeExtractor([np.zeros(128)]), image=object())

    assert descriptor is not None
    assert descriptor.shape == (128,)


def test_empty_descriptor_from_extractor_raises() -> None:
    with pytest.raises(EmptyQuery):
        extract_descriptors(FakeExtractor([[]]), image=object())


def test_all_faces_in_detection_order() -> None:
    descriptors = extract_descriptors(FakeExtractor([[1.0], [2.0]]), image=object())

    assert [d.tolist() for d in descriptors] == [[1.0], [2.0]]
