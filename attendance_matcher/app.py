"""
Flask application for HTTP API.

Provides:
- GET /health: Service health check
- POST /match: Identify a descriptor against loaded references
- POST /match/batch: Identify several descriptors
- POST /compare: Compare two descriptors
- POST /references/reload: Reload reference descriptors
"""

import time
from typing import Any, Callable, Optional

import numpy as np
from flask import Flask, jsonify, request
from flask_cors import CORS

from .attendance import AttendanceMarker
from .config import Config
from .logging_config import get_logger
from .recognition.descriptors import as_descriptor
from .recognition.errors import MatcherError
from .recognition.matching import FaceMatcher
from .utils.timing import format_uptime

logger = get_logger(__name__)


class BadRequest(Exception):
    """Malformed request payload."""


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BadRequest('Request body must be a JSON object')
    return payload


def _require(payload: dict, key: str) -> Any:
    if key not in payload:
        raise BadRequest(f'Missing field: {key}')
    return payload[key]


def _descriptor(value: Any, name: str) -> np.ndarray:
    try:
        return as_descriptor(value)
    except (TypeError, ValueError) as e:
        raise BadRequest(f'Invalid descriptor {name}: {e}')


def create_app(
    config: Config,
    matcher: FaceMatcher,
    marker: Optional[AttendanceMarker] = None,
    loader: Optional[Callable[[], FaceMatcher]] = None
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Service configuration
        matcher: Matcher built from the current reference snapshot
        marker: Attendance marker fed by positive /match results
        loader: Callable building a fresh matcher for /references/reload

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    CORS(app)

    # Replaced as a whole on reload; handlers read it once per request.
    state = {'matcher': matcher}
    started_at = time.time()

    @app.errorhandler(BadRequest)
    def bad_request(error):
        return jsonify({'error': str(error)}), 400

    @app.errorhandler(MatcherError)
    def matcher_error(error):
        logger.warning(f'Rejected request: {error}')
        return jsonify({'error': str(error), 'type': type(error).__name__}), 400

    @app.route('/health')
    def health():
        """Health check endpoint."""
        current: FaceMatcher = state['matcher']
        return jsonify({
            'status': 'ok',
            'service': config.service_name,
            'references': len(current),
            'threshold': current.threshold,
            'uptime': format_uptime(time.time() - started_at),
        })

    @app.route('/match', methods=['POST'])
    def match():
        """Identify one descriptor; record attendance when courseId is given."""
        payload = _json_body()
        descriptor = _descriptor(_require(payload, 'descriptor'), 'descriptor')

        result = state['matcher'].find_best_match(descriptor)
        body = result.to_dict()

        course_id = payload.get('courseId')
        if marker is not None and course_id is not None:
            body['marked'] = marker.observe(result, course_id=course_id) is not None

        return jsonify(body)

    @app.route('/match/batch', methods=['POST'])
    def match_batch():
        """Identify every descriptor detected in one frame."""
        payload = _json_body()
        descriptors = _require(payload, 'descriptors')
        if not isinstance(descriptors, list):
            raise BadRequest('descriptors must be a list')

        queries = [_descriptor(d, f'descriptors[{i}]') for i, d in enumerate(descriptors)]
        results = state['matcher'].match_all(queries)
        return jsonify({'results': [result.to_dict() for result in results]})

    @app.route('/compare', methods=['POST'])
    def compare():
        """Compare a live descriptor against one reference descriptor."""
        payload = _json_body()
        a = _descriptor(_require(payload, 'a'), 'a')
        b = _descriptor(_require(payload, 'b'), 'b')

        try:
            threshold = float(payload.get('threshold', config.compare_threshold))
        except (TypeError, ValueError):
            raise BadRequest('threshold must be a number')

        try:
            comparer = FaceMatcher(threshold=threshold)
        except ValueError as e:
            raise BadRequest(str(e))

        result = comparer.compare_single(a, b, label=str(payload.get('label', 'reference')))
        return jsonify(result.to_dict())

    @app.route('/references/reload', methods=['POST'])
    def reload_references():
        """Reload reference descriptors and swap the matcher."""
        if loader is None:
            return jsonify({'error': 'Reload not configured'}), 501

        state['matcher'] = loader()
        logger.info(f'References reloaded: {len(state["matcher"])} students')

        return jsonify({'status': 'ok', 'references': len(state['matcher'])})

    return app
