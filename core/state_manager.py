"""
State Manager - Holds the per-subject baseline used for change detection.
"""

import os
import json
import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional
from threading import Lock

from models.subject import SubjectState


class StateManager:
    """
    Keeps one SubjectState per subject id.

    State lives in memory; when a state file is given, the latest baseline of
    each subject is also written to it so a restart resumes from it.
    """

    def __init__(self, state_file: str = None):
        """
        Initialize state manager.

        Args:
            state_file: Optional path to a JSON state file
        """
        self.state_file = state_file
        self.logger = logging.getLogger('StateManager')
        self._lock = Lock()
        self._states: Dict[str, SubjectState] = self._load_state()

    def _load_state(self) -> Dict[str, SubjectState]:
        """Load state from file."""
        if not self.state_file or not os.path.exists(self.state_file):
            return {}
        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self.logger.warning(f"Could not load state file: {e}")
            return {}

        if not isinstance(raw, dict):
            self.logger.warning("Ignoring state file without a top-level object")
            return {}

        return {
            subject_id: SubjectState.from_dict(subject_id, data)
            for subject_id, data in raw.items()
            if isinstance(data, dict)
        }

    def _save_state(self) -> None:
        """Save state to file."""
        if not self.state_file:
            return
        try:
            directory = os.path.dirname(self.state_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(self.state_file, 'w', encoding='utf-8') as f:
                json.dump(
                    {sid: state.to_dict() for sid, state in self._states.items()},
                    f,
                    indent=2
                )
        except IOError as e:
            self.logger.error(f"Error saving state file: {e}")

    def get_state(self, subject_id: str) -> SubjectState:
        """
        Get a copy of the state for a subject.

        Unknown subjects get a fresh state in its first-observation phase.
        """
        with self._lock:
            state = self._states.get(subject_id)
            if state is None:
                state = SubjectState(subject_id=subject_id)
                self._states[subject_id] = state
            return replace(state)

    def get_last_count(self, subject_id: str) -> Optional[int]:
        with self._lock:
            state = self._states.get(subject_id)
            return state.last_count if state else None

    def record_observation(
        self,
        subject_id: str,
        count: int,
        signature: str = None
    ) -> SubjectState:
        """
        Store a new baseline after a successful observation.

        Args:
            subject_id: Subject identifier
            count: Number of graded items observed
            signature: Content signature of the observed items

        Returns:
            Copy of the updated state
        """
        with self._lock:
            state = self._states.setdefault(subject_id, SubjectState(subject_id=subject_id))
            state.last_count = count
            state.last_signature = signature
            state.first_observation = False
            state.last_success = datetime.now()

            self._save_state()
            return replace(state)

    def get_all_states(self) -> Dict[str, SubjectState]:
        """Get copies of all stored states."""
        with self._lock:
            return {sid: replace(state) for sid, state in self._states.items()}

    def clear_state(self, subject_id: str) -> None:
        """Clear state for a specific subject."""
        with self._lock:
            if subject_id in self._states:
                del self._states[subject_id]
                self._save_state()

    def clear_all(self) -> None:
        """Clear all stored state."""
        with self._lock:
            self._states = {}
            self._save_state()
