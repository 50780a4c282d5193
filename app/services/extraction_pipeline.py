# app/services/extraction_pipeline.py
"""
Turn a generative service's raw reply into a structured meal record.

The model is asked for a single JSON object, but in practice replies arrive
wrapped in code fences, truncated, followed by prose, or carrying the
doubled-quote corruption (`"name": "" "Egusi Soup" ""`). Recovery is an
ordered list of strategies; the first one producing a record with a
non-empty name wins:

  1. direct parse            (only when the classifier says it parses)
  2. structural repair       (json_repair, never for the doubled-quote defect)
  3. field extraction        (regex alternatives per field)
  4. emergency reconstruction (first capitalised multi-word phrase as name)

The pipeline is stateless; one instance can be shared freely.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from json_repair import repair_json

from app.models.suggestion import ContentAnalysis, default_nutrition
from app.services.content_classifier import ContentClassifier
from app.services.errors import ExtractionFailure

logger = logging.getLogger(__name__)

Strategy = Callable[[str, ContentAnalysis], Optional[Dict[str, Any]]]

STRING_FIELDS = (
    "name",
    "description",
    "prep_time",
    "difficulty",
    "cuisine",
    "serving_size",
    "estimated_cost",
)
LIST_FIELDS = ("ingredients", "instructions", "tags")
NUTRITION_KEYS = ("calories", "protein", "carbs", "fat")

# Ordered alternatives for a scalar field; %s is the escaped key.
_STRING_TEMPLATES = (
    r'"%s"\s*:\s*"([^"]*)"',  # "key": "value"
    r'"%s"\s*:\s*""\s*"?([^",}\]][^"]*)"',  # "key": "" "value" ""
    r'\b%s\s*:\s*"([^"]*)"',  # key: "value"
    r'"%s"\s*:\s*([^\s,"{}\[\]][^,\n\r}]*)',  # "key": value
    r'\b%s\s*:\s*([^\s,"{}\[\]][^,\n\r}]*)',  # key: value
    r'"%s"\s*:\s*"([^"\n\r]+)',  # "key": "value cut off
)
_LIST_TEMPLATES = (
    r'"%s"\s*:\s*\[([^\]]*)\]',
    r'\b%s\s*:\s*\[([^\]]*)\]',
    r'"%s"\s*:\s*\[([^\]]*)$',  # truncated array
)
_NUTRITION_RE = re.compile(r'"?nutrition_info"?\s*:\s*\{([^}]*)\}?')
_QUOTED_ITEM_RE = re.compile(r'"([^"]*)"')
_CAPITALISED_PHRASE_RE = re.compile(r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)+")
_CODE_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_CODE_FENCE_CLOSE_RE = re.compile(r"\s*```$")

EXTRACTION_DEFAULTS: Dict[str, Any] = {
    "description": "",
    "prep_time": "45 mins",
    "difficulty": "Medium",
    "cuisine": "Nigerian",
    "serving_size": "3-4 people",
    "estimated_cost": "Moderate",
}

RECONSTRUCTION_DEFAULTS: Dict[str, Any] = {
    "description": "A delicious traditional Nigerian meal prepared with authentic methods",
    "prep_time": "45 mins",
    "ingredients": ["Traditional ingredients", "Palm oil", "Pepper", "Onions"],
    "instructions": [
        "Prepare traditional ingredients",
        "Cook with authentic methods",
        "Serve hot",
    ],
    "difficulty": "Medium",
    "cuisine": "Nigerian",
    "tags": ["Traditional", "Cultural"],
    "serving_size": "3-4 people",
    "estimated_cost": "Moderate",
}


def _compile(templates: Tuple[str, ...], key: str) -> List[Pattern]:
    return [re.compile(t % re.escape(key)) for t in templates]


def clean_value(value: Optional[str]) -> str:
    """Trim, strip stray quotes at both edges and collapse internal whitespace."""
    if not value:
        return ""
    value = value.strip()
    # also removes the `"" "` / `" ""` artifact left at the edges
    value = re.sub(r'^["\s]+|["\s]+$', "", value)
    return re.sub(r"\s+", " ", value)


def is_valid_candidate(candidate: Any) -> bool:
    if not isinstance(candidate, dict):
        return False
    name = candidate.get("name")
    return isinstance(name, str) and bool(name.strip())


def strip_code_fence(content: str) -> str:
    text = (content or "").strip()
    if text.startswith("```"):
        text = _CODE_FENCE_OPEN_RE.sub("", text, count=1)
        text = _CODE_FENCE_CLOSE_RE.sub("", text, count=1).strip()
    return text


class ExtractionPipeline:

    def __init__(self, classifier: Optional[ContentClassifier] = None):
        self.classifier = classifier or ContentClassifier()

        self._string_patterns: Dict[str, List[Pattern]] = {
            f: _compile(_STRING_TEMPLATES, f) for f in STRING_FIELDS
        }
        self._nutrition_patterns: Dict[str, List[Pattern]] = {
            k: _compile(_STRING_TEMPLATES, k) for k in NUTRITION_KEYS
        }
        self._list_patterns: Dict[str, List[Pattern]] = {
            f: _compile(_LIST_TEMPLATES, f) for f in LIST_FIELDS
        }

        self.strategies: List[Tuple[str, Strategy]] = [
            ("direct_parse", self._parse_direct),
            ("structural_repair", self._repair_structure),
            ("field_extraction", self._extract_fields),
            ("emergency_reconstruction", self._reconstruct),
        ]

    # Public API
    def extract(self, raw_text: str) -> Dict[str, Any]:
        record, _ = self.extract_verbose(raw_text)
        return record

    def extract_verbose(self, raw_text: str) -> Tuple[Dict[str, Any], str]:
        """Return (record, name of the strategy that produced it)."""
        content = strip_code_fence(raw_text)
        analysis = self.classifier.classify(content)

        for name, strategy in self.strategies:
            candidate = strategy(content, analysis)
            if is_valid_candidate(candidate):
                logger.debug("Extraction succeeded via %s", name)
                return candidate, name

        logger.warning("All extraction strategies failed (preview=%r)", content[:120])
        raise ExtractionFailure("All extraction strategies failed", raw_preview=content[:200])

    # --- strategies ---
    def _parse_direct(self, content: str, analysis: ContentAnalysis) -> Optional[Dict[str, Any]]:
        if not analysis.is_valid_json:
            return None
        try:
            return json.loads(content)
        except ValueError:
            return None

    def _repair_structure(self, content: str, analysis: ContentAnalysis) -> Optional[Dict[str, Any]]:
        # repair makes the doubled-quote defect worse, the classifier already excludes it
        if not analysis.is_repairable:
            return None
        try:
            repaired = repair_json(content)
            parsed = json.loads(repaired)
        except ValueError as exc:
            logger.debug("Structural repair failed: %s", exc)
            return None
        return parsed if isinstance(parsed, dict) else None

    def _extract_fields(self, content: str, analysis: ContentAnalysis) -> Optional[Dict[str, Any]]:
        record: Dict[str, Any] = {}

        for field in STRING_FIELDS:
            value = self._first_match(self._string_patterns[field], content)
            if value:
                record[field] = value

        if not record.get("name"):
            return None

        for field in LIST_FIELDS:
            record[field] = self._extract_list(field, content)

        record["nutrition_info"] = self._extract_nutrition(content)

        for field, default in EXTRACTION_DEFAULTS.items():
            record.setdefault(field, default)
        return record

    def _reconstruct(self, content: str, analysis: ContentAnalysis) -> Optional[Dict[str, Any]]:
        match = _CAPITALISED_PHRASE_RE.search(content)
        if not match:
            return None
        record: Dict[str, Any] = {"name": clean_value(match.group(0))}
        for field, default in RECONSTRUCTION_DEFAULTS.items():
            record[field] = list(default) if isinstance(default, list) else default
        record["nutrition_info"] = default_nutrition()
        return record

    # --- helpers ---
    def _first_match(self, patterns: List[Pattern], text: str) -> str:
        for pattern in patterns:
            m = pattern.search(text)
            if m:
                value = clean_value(m.group(1))
                if value:
                    return value
        return ""

    def _extract_list(self, field: str, content: str) -> List[str]:
        for pattern in self._list_patterns[field]:
            m = pattern.search(content)
            if not m:
                continue
            body = m.group(1)
            if '"' in body:
                items = [clean_value(i) for i in _QUOTED_ITEM_RE.findall(body)]
            else:
                items = [clean_value(i) for i in body.split(",")]
            items = [i for i in items if i]
            if items:
                return items
        return []

    def _extract_nutrition(self, content: str) -> Dict[str, str]:
        nutrition = default_nutrition()
        m = _NUTRITION_RE.search(content)
        if not m:
            return nutrition
        body = m.group(1)
        for key, patterns in self._nutrition_patterns.items():
            value = self._first_match(patterns, body)
            if value:
                nutrition[key] = value
        return nutrition
