"""
Writes parsed upstream payloads to disk for inspection when debug mode is on.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger('DebugDump')


def dump_path_for(base_path: str, subject_id: str, per_subject: bool) -> str:
    """'debug.json' becomes 'debug-<id>.json' when several subjects share one base path."""
    if not per_subject:
        return base_path
    root, ext = os.path.splitext(base_path)
    return f"{root}-{subject_id}{ext or '.json'}"


def write_debug_payload(payload: Dict[str, Any], path: str) -> Optional[str]:
    """
    Write the payload as JSON, overwriting any previous dump.

    Returns:
        The path written, or None if writing failed
    """
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
    except (IOError, TypeError) as e:
        logger.warning(f"Could not write debug payload to {path}: {e}")
        return None

    logger.debug(f"Debug payload written to {path}")
    return path
