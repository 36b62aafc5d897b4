"""
Scenario Simulator Routes
"""
import logging
from flask import Blueprint, current_app, request, jsonify

from customs_sentinel.errors import EmptyInputError
from customs_sentinel.orchestrator import run_async
from customs_sentinel.serializers import simulation_to_dict

logger = logging.getLogger('customs_sentinel.routes.simulator')

bp = Blueprint('simulator', __name__, url_prefix='/api/simulator')


@bp.route('', methods=['GET'])
def get_simulation():
    sentinel = current_app.extensions['sentinel']
    return jsonify(simulation_to_dict(sentinel.store.state.simulation)), 200


@bp.route('', methods=['POST'])
def run_simulation():
    """
    Simulate the risk outcome of a hypothetical scenario

    Expects JSON body:
    {
        "scenario": "Transshipment of solar panels via ..."
    }
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object'}), 400
    scenario = data.get('scenario') or ''
    if not isinstance(scenario, str):
        return jsonify({'error': 'scenario must be a string'}), 400

    sentinel = current_app.extensions['sentinel']
    try:
        slot = run_async(sentinel.run_simulation(scenario))
    except EmptyInputError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify(simulation_to_dict(slot)), 200
