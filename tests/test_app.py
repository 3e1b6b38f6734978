"""Tests for the HTTP API."""

from __future__ import annotations

import pytest

from attendance_matcher.app import create_app
from attendance_matcher.attendance import AttendanceMarker
from attendance_matcher.recognition import FaceMatcher


@pytest.fixture
def marks():
    return []


@pytest.fixture
def client(config, matcher, marks):
    marker = AttendanceMarker(listeners=[marks.append])
    reloaded = FaceMatcher.from_mapping({'S9': [[0.0, 0.0, 0.0, 1.0]]})
    app = create_app(config, matcher, marker=marker, loader=lambda: reloaded)
    app.config['TESTING'] = True
    return app.test_client()


def test_health(client) -> None:
    response = client.get('/health')

    assert response.status_code == 200
    body = response.get_json()
    assert body['status'] == 'ok'
    assert body['references'] == 2
    assert body['threshold'] == 0.5


def test_match_returns_result(client) -> None:
    response = client.post('/match', json={'descriptor': [0.0, 0.0, 1.0, 0.0]})

    assert response.status_code == 200
    assert response.get_json() == {
        'label': 'S2',
        'distance': 0.0,
        'similarity': 1.0,
        'isMatch': True,
    }


def test_match_with_course_marks_attendance_once(client, marks) -> None:
    payload = {'descriptor': [1.0, 0.0, 0.0, 0.0], 'courseId': 12}

    first = client.post('/match', json=payload).get_json()
    second = client.post('/match', json=payload).get_json()

    assert first['marked'] is True
    assert second['marked'] is False
    assert [(m.student_id, m.course_id) for m in marks] == [('S1', '12')]


def test_match_dimension_mismatch_is_bad_request(client) -> None:
    response = client.post('/match', json={'descriptor': [1.0, 0.0]})

    assert response.status_code == 400
    assert response.get_json()['type'] == 'DimensionMismatch'


def test_match_empty_query_is_bad_request(client) -> None:
    response = client.post('/match', json={'descriptor': []})

    assert response.status_code == 400
    assert response.get_json()['type'] == 'EmptyQuery'


def test_match_requires_descriptor(client) -> None:
    response = client.post('/match', json={})

    assert response.status_code == 400
    assert 'descriptor' in response.get_json()['error']


def test_match_rejects_non_numeric_descriptor(client) -> None:
    response = client.post('/match', json={'descriptor': ['a', 'b', 'c', 'd']})

    assert response.status_code == 400


def test_match_batch(client) -> None:
    response = client.post('/match/batch', json={'descriptors': [[1.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 9.0]]})

    assert response.status_code == 200
    labels = [r['label'] for r in response.get_json()['results']]
    assert labels == ['S1', 'unknown']


def test_compare_uses_request_threshold(client) -> None:
    payload = {'a': [0.0, 0.0], 'b': [0.55, 0.0]}

    default = client.post('/compare', json=payload).get_json()
    relaxed = client.post('/compare', json={**payload, 'threshold': 0.6}).get_json()

    assert default['isMatch'] is False
    assert relaxed['isMatch'] is True
    assert relaxed['label'] == 'reference'


def test_compare_rejects_invalid_threshold(client) -> None:
    response = client.post('/compare', json={'a': [0.0], 'b': [0.0], 'threshold': 0})

    assert response.status_code == 400


def test_reload_swaps_matcher(client) -> None:
    response = client.post('/references/reload')

    assert response.status_code == 200
    assert response.get_json()['references'] == 1
    assert client.post('/match', json={'descriptor': [0.0, 0.0, 0.0, 1.0]}).get_json()['label'] == 'S9'


def test_reload_without_loader(config, matcher) -> None:
    app = create_app(config, matcher)

    assert app.test_client().post('/references/reload').status_code == 501


def test_match_rejects_nan_descriptor(client) -> None:
    response = client.post(
        '/match',
        data='{"descriptor": [NaN, 0.0, 0.0, 0.0]}',
        content_type='application/json',
    )

    assert response.status_code == 400
    assert response.get_json()['type'] == 'NonFiniteQuery'


def test_match_rejects_nested_descriptor(client) -> None:
    response = client.post('/match', json={'descriptor': [[1.0, 0.0, 0.0, 0.0]]})

    assert response.status_code == 400
    assert 'Invalid descriptor' in response.get_json()['error']


def test_match_batch_reports_bad_entry(client) -> None:
    response = client.post('/match/batch', json={'descriptors': [[1.0, 0.0, 0.0, 0.0], 'oops']})

    assert response.status_code == 400
    assert 'descriptors[1]' in response.get_json()['error']


def test_compare_rejects_non_numeric_reference(client) -> None:
    response = client.post('/compare', json={'a': [0.0, 1.0], 'b': ['x', 'y']})

    assert response.status_code == 400
    assert 'Invalid descriptor b' in response.get_json()['error']


def test_reload_failure_is_server_error(config, matcher) -> None:
    def broken_loader():
        raise ValueError('corrupt reference snapshot')

    app = create_app(config, matcher, loader=broken_loader)

    response = app.test_client().post('/references/reload')

    assert response.status_code == 500
    assert app.test_client().get('/health').get_json()['references'] == 2
