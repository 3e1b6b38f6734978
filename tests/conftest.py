"""Shared fixtures for matcher tests."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from attendance_matcher.config import load_config
from attendance_matcher.recognition import FaceMatcher, LabeledDescriptorSet


def unit(dim: int, index: int, scale: float = 1.0) -> list[float]:
    vector = [0.0] * dim
    vector[index] = scale
    return vector


@pytest.fixture
def config(tmp_path, monkeypatch):
    for name in ('BACKEND_URL', 'MATCH_THRESHOLD', 'COMPARE_THRESHOLD', 'CACHE_FILE', 'LOG_FILE', 'DEBUG'):
        monkeypatch.delenv(name, raising=False)
    return dataclasses.replace(
        load_config(),
        backend_url='http://backend.test',
        cache_file=str(tmp_path / 'cache.pkl'),
        request_retries=1,
    )


@pytest.fixture
def reference_sets() -> list[LabeledDescriptorSet]:
    return [
        LabeledDescriptorSet('S1', [unit(4, 0), unit(4, 1)]),
        LabeledDescriptorSet('S2', [unit(4, 2)]),
    ]


@pytest.fixture
def matcher(reference_sets) -> FaceMatcher:
    return FaceMatcher(reference_sets, threshold=0.5)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)
