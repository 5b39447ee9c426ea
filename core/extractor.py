"""
Record Extractor - Turns the grade query response into an ObservationSnapshot.
"""

import json
import logging
import math
from typing import Any, Dict, Optional

from models.grade import GradedItem, ObservationSnapshot
from utils.exceptions import EmptyResultError, ParseError

# Field names used by the academic-affairs grade query endpoint.
DEFAULT_FIELD_MAP = {
    'items': 'items',
    'score': 'bfzcj',
    'credit': 'xf',
    'course': 'kcmc',
    'grade_point': 'jd',
    'name': 'xm',
}


def to_number(value: Any) -> Optional[float]:
    """
    Convert a JSON scalar to a finite float.

    Returns:
        float, or None if the value is not numeric
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class RecordExtractor:
    """Parses grade payloads and builds sorted snapshots."""

    def __init__(self, field_map: Dict[str, str] = None):
        self.fields = {**DEFAULT_FIELD_MAP, **(field_map or {})}
        self.logger = logging.getLogger('RecordExtractor')

    def parse_payload(self, body: str) -> Dict[str, Any]:
        """Decode the response body into a JSON object."""
        try:
            payload = json.loads(body)
        except (TypeError, json.JSONDecodeError) as e:
            raise ParseError(f"Response is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )
        return payload

    def extract_from_payload(self, payload: Dict[str, Any]) -> ObservationSnapshot:
        """
        Build a snapshot from a decoded payload.

        Raises:
            EmptyResultError: the item list is empty
            ParseError: the item list is missing or malformed
        """
        items_field = self.fields['items']
        raw_items = payload.get(items_field)
        if raw_items is None:
            raise ParseError(f"Missing '{items_field}' list in response")
        if not isinstance(raw_items, list):
            raise ParseError(f"'{items_field}' is not a list")
        if not raw_items:
            raise EmptyResultError("No grades yet.")

        items = [self._parse_item(index, raw) for index, raw in enumerate(raw_items)]

        name = raw_items[0].get(self.fields['name'])
        if name is None or str(name).strip() == '':
            raise ParseError(f"Missing '{self.fields['name']}' on first item")

        snapshot = ObservationSnapshot(
            student_name=str(name).strip(),
            items=sorted(items, key=GradedItem.sort_key)
        )
        self.logger.debug(
            f"Extracted {snapshot.item_count} items for {snapshot.student_name}"
        )
        return snapshot

    def extract(self, body: str) -> ObservationSnapshot:
        return self.extract_from_payload(self.parse_payload(body))

    def _parse_item(self, index: int, raw: Any) -> GradedItem:
        if not isinstance(raw, dict):
            raise ParseError(f"Item {index} is not an object")

        course = raw.get(self.fields['course'])
        if course is None or str(course).strip() == '':
            raise ParseError(f"Item {index} has no '{self.fields['course']}'")
        course = str(course).strip()

        score = self._required_number(raw, 'score', index, course)
        credit = self._required_number(raw, 'credit', index, course)

        # Grade point only feeds the optional GPA line.
        grade_point = to_number(raw.get(self.fields['grade_point']))

        return GradedItem(
            score=score,
            credit=credit,
            course=course,
            grade_point=grade_point
        )

    def _required_number(self, raw: Dict[str, Any], key: str, index: int, course: str) -> float:
        field_name = self.fields[key]
        if field_name not in raw:
            raise ParseError(f"Item {index} ({course}) has no '{field_name}'")
        number = to_number(raw[field_name])
        if number is None:
            raise ParseError(
                f"Item {index} ({course}) has non-numeric '{field_name}': {raw[field_name]!r}"
            )
        return number
