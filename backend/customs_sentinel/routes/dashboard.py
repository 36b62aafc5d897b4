"""
Dashboard Routes
Queue statistics, intelligence feed, Border Queue System traffic, HS lookup and current view
"""
from flask import Blueprint, current_app, request, jsonify

from customs_sentinel import state as actions
from customs_sentinel.serializers import view_to_dict
from customs_sentinel.state import View

bp = Blueprint('dashboard', __name__, url_prefix='/api')


def _sentinel():
    return current_app.extensions['sentinel']


@bp.route('/dashboard/stats', methods=['GET'])
def stats():
    return jsonify(_sentinel().repository.stats()), 200


@bp.route('/dashboard/events', methods=['GET'])
def events():
    return jsonify({
        'events': [e.model_dump(mode='json') for e in _sentinel().repository.events()]
    }), 200


@bp.route('/dashboard/traffic', methods=['GET'])
def traffic():
    return jsonify({
        'segments': [s.model_dump(by_alias=True, mode='json') for s in _sentinel().repository.traffic()]
    }), 200


@bp.route('/dashboard/view', methods=['GET'])
def get_view():
    return jsonify(view_to_dict(_sentinel().store.state)), 200


@bp.route('/dashboard/view', methods=['POST'])
def set_view():
    """
    Switch the active dashboard panel

    Expects JSON body:
    {
        "view": "simulator"
    }
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object'}), 400
    try:
        view = View(data.get('view'))
    except ValueError:
        return jsonify({'error': f"Unknown view: {data.get('view')}"}), 400

    store = _sentinel().store
    store.dispatch(actions.select_view, view)
    return jsonify(view_to_dict(store.state)), 200


@bp.route('/hs-codes/<path:hs_code>', methods=['GET'])
def lookup_hs_code(hs_code):
    hs_codes = _sentinel().gateway.hs_codes
    validation = hs_codes.validate_code_format(hs_code)
    if not validation['is_valid_format']:
        return jsonify({'error': 'Invalid HS code', 'issues': validation['issues']}), 400

    entry = hs_codes.lookup_code(hs_code)
    if entry is None:
        return jsonify({'error': f'HS code {hs_code} not in registry'}), 404
    return jsonify(entry), 200
