"""
Declaration Queue Routes
Inbound queue listing, detail lookup and case selection
"""
import logging
from flask import Blueprint, current_app, request, jsonify

from customs_sentinel.orchestrator import DeclarationNotFound
from customs_sentinel.serializers import analysis_to_dict
from customs_sentinel.services.declaration_repository import parse_risk_filter

logger = logging.getLogger('customs_sentinel.routes.declarations')

bp = Blueprint('declarations', __name__, url_prefix='/api')


def _sentinel():
    return current_app.extensions['sentinel']


@bp.route('/declarations', methods=['GET'])
def list_declarations():
    """
    List declarations in the inbound queue

    Query params:
        risk: ALL (default) or one of LOW, MEDIUM, HIGH, CRITICAL
    """
    try:
        risk_filter = parse_risk_filter(request.args.get('risk'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    declarations = _sentinel().repository.list(risk_filter)
    return jsonify({
        'declarations': [d.to_wire() for d in declarations],
        'filter': risk_filter.value if risk_filter else 'ALL',
        'count': len(declarations),
    }), 200


@bp.route('/declarations/<declaration_id>', methods=['GET'])
def get_declaration(declaration_id):
    declaration = _sentinel().repository.get(declaration_id)
    if declaration is None:
        return jsonify({'error': f'Declaration {declaration_id} not found'}), 404
    return jsonify(declaration.to_wire()), 200


@bp.route('/selection', methods=['POST'])
def select_declaration():
    """
    Select a declaration for review

    Expects JSON body:
    {
        "declaration_id": "DEC-882190"
    }

    Any analysis for the previously selected declaration is discarded.
    """
    data = request.get_json(silent=True)

    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No JSON object provided'}), 400

    declaration_id = data.get('declaration_id')
    if not declaration_id or not isinstance(declaration_id, str):
        return jsonify({'error': 'declaration_id required'}), 400

    sentinel = _sentinel()
    try:
        declaration = sentinel.select_declaration(declaration_id)
    except DeclarationNotFound:
        return jsonify({'error': f'Declaration {declaration_id} not found'}), 404

    return jsonify({
        'declaration': declaration.to_wire(),
        'analysis': analysis_to_dict(sentinel.store.state.analysis),
    }), 200


@bp.route('/selection', methods=['DELETE'])
def clear_selection():
    sentinel = _sentinel()
    sentinel.select_declaration(None)
    return jsonify({'analysis': analysis_to_dict(sentinel.store.state.analysis)}), 200
