# app/services/content_classifier.py
"""
Structural inspection of raw generative replies.

The classifier never modifies the text; it only decides which extraction
strategies are worth running.
"""
from __future__ import annotations

import json
import logging

from app.models.suggestion import ContentAnalysis

logger = logging.getLogger(__name__)

# `"name": "" "Egusi Soup" ""` style corruption produced by the model
DOUBLED_QUOTE_MARKERS = ('"" "', '" ""')


def has_doubled_quote_defect(content: str) -> bool:
    return any(marker in content for marker in DOUBLED_QUOTE_MARKERS)


def _parses_as_object(content: str) -> bool:
    trimmed = content.strip()
    if not trimmed.startswith("{") or "}" not in trimmed:
        return False
    try:
        return isinstance(json.loads(trimmed), dict)
    except ValueError:
        return False


class ContentClassifier:

    def classify(self, content: str) -> ContentAnalysis:
        content = content or ""
        is_valid_json = _parses_as_object(content)
        has_defect = has_doubled_quote_defect(content)
        has_name = '"name"' in content or "name:" in content
        has_description = '"description"' in content or "description:" in content

        analysis = ContentAnalysis(
            is_valid_json=is_valid_json,
            has_known_quote_defect=has_defect,
            has_name_field=has_name,
            has_description_field=has_description,
            # JSON-shaped but broken in some way that a structural repair can fix
            is_repairable=has_name and has_description and not has_defect and not is_valid_json,
        )
        logger.debug("Content analysis: %s", analysis.model_dump())
        return analysis
