"""
HS Code Reference Service

In-memory registry of the HS subheadings that appear in the inbound queue.
Used to enrich analysis prompts and by the HS code lookup route.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger('customs_sentinel.services.hs_codes')


HS_CODE_REGISTRY: Dict[str, str] = {
    "8542.31": "Electronic integrated circuits: Processors and controllers, whether or not combined with memories, converters, logic circuits, amplifiers, clock and timing circuits, or other circuits.",
    "8433.90": "Parts of harvesting or threshing machinery, including combined harvester-threshers; grass or hay mowers; machines for cleaning, sorting or grading eggs, fruit or other agricultural produce.",
    "2710.19": "Petroleum oils and oils obtained from bituminous minerals (other than crude) and preparations not elsewhere specified or included, containing by weight 70% or more of these oils, other than light oils and preparations.",
    "8517.62": "Machines for the reception, conversion and transmission or regeneration of voice, images or other data, including switching and routing apparatus.",
    "9013.80": "Other optical appliances and instruments, not specified or included elsewhere in this chapter; lasers, other than laser diodes; other appliances and instruments.",
    "8542.90": "Parts of electronic integrated circuits and microassemblies.",
}


def _digits(hs_code: str) -> str:
    return ''.join(filter(str.isdigit, hs_code))


class HSCodeReferenceService:
    """
    Lookup and format validation for HS codes.

    Codes are matched on their 6-digit subheading, so "8542.31",
    "854231" and "8542.31.0000" all resolve to the same entry.
    """

    def __init__(self, registry: Optional[Dict[str, str]] = None):
        source = registry if registry is not None else HS_CODE_REGISTRY
        self._by_subheading: Dict[str, Dict[str, str]] = {}
        for code, description in source.items():
            self._by_subheading[_digits(code)[:6]] = {'code': code, 'description': description}

    def lookup_code(self, hs_code: str) -> Optional[Dict[str, Any]]:
        """
        Look up an HS code by its subheading.

        Args:
            hs_code: The HS code to look up (4-10 digits, separators allowed)

        Returns:
            Dict with code details if found, None otherwise
        """
        validation = self.validate_code_format(hs_code)
        if not validation['is_valid_format']:
            return None

        entry = self._by_subheading.get(validation['components']['subheading'])
        if entry is None:
            logger.debug(f"HS code {hs_code} not in registry")
            return None
        return self._format_result(entry, validation)

    def describe(self, hs_code: str) -> Optional[str]:
        entry = self.lookup_code(hs_code)
        return entry['description'] if entry else None

    def validate_code_format(self, hs_code: str) -> Dict[str, Any]:
        """
        Validate the format of an HS code.

        Args:
            hs_code: The HS code to validate

        Returns:
            Dict with validation results
        """
        clean_code = _digits(hs_code or '')

        result = {
            'original': hs_code,
            'normalized': clean_code,
            'is_valid_format': False,
            'issues': [],
            'components': {}
        }

        if len(clean_code) < 4:
            result['issues'].append(f"Code too short ({len(clean_code)} digits, minimum 4)")
        elif len(clean_code) > 10:
            result['issues'].append(f"Code too long ({len(clean_code)} digits, maximum 10)")
        else:
            result['is_valid_format'] = True
            padded = clean_code.ljust(10, '0')
            result['components'] = {
                'chapter': padded[:2],
                'heading': padded[:4],
                'subheading': padded[:6],
                'full': padded
            }

        # Chapters run 01-97
        if result['is_valid_format']:
            chapter = int(result['components']['chapter'])
            if chapter < 1 or chapter > 97:
                result['is_valid_format'] = False
                result['issues'].append(f"Invalid chapter code: {chapter:02d}")

        return result

    def _format_result(self, entry: Dict[str, str], validation: Dict[str, Any]) -> Dict[str, Any]:
        components = validation['components']
        return {
            'code': entry['code'],
            'description': entry['description'],
            'chapter': components.get('chapter', ''),
            'heading': components.get('heading', ''),
            'subheading': components.get('subheading', ''),
        }
