"""
Risk Analysis Routes
Runs the Analysis Gateway against the selected declaration
"""
import logging
from flask import Blueprint, current_app, request, jsonify

from customs_sentinel.orchestrator import NoSelectionError, run_async
from customs_sentinel.serializers import analysis_to_dict
from customs_sentinel.state import AnalysisKind

logger = logging.getLogger('customs_sentinel.routes.analysis')

bp = Blueprint('analysis', __name__, url_prefix='/api/analysis')


@bp.route('', methods=['GET'])
def get_analysis():
    sentinel = current_app.extensions['sentinel']
    return jsonify(analysis_to_dict(sentinel.store.state.analysis)), 200


@bp.route('', methods=['POST'])
def run_analysis():
    """
    Evaluate the selected declaration

    Optional JSON body:
    {
        "kind": "assessment" | "document_scan"
    }

    Returns:
        Analysis slot. A failed model call is reported as status FAILED with
        an error message, not as an HTTP error.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object'}), 400

    try:
        kind = AnalysisKind(data.get('kind', AnalysisKind.ASSESSMENT.value))
    except ValueError:
        return jsonify({'error': f"Unknown analysis kind: {data.get('kind')}"}), 400

    sentinel = current_app.extensions['sentinel']

    logger.info("=" * 60)
    logger.info(f"🛰️  RISK ANALYSIS ({kind.value})")
    logger.info("=" * 60)

    try:
        slot = run_async(sentinel.analyze_selected(kind))
    except NoSelectionError as e:
        return jsonify({'error': str(e)}), 409

    logger.info(f"Analysis finished: {slot.status.value}")
    return jsonify(analysis_to_dict(slot)), 200
