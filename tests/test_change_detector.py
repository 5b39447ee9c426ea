"""
Tests for change detection policy.
"""

import pytest

from core.change_detector import ChangeDecision, detect_change


class TestDetectChange:
    """Tests for detect_change."""

    def test_first_observation_never_changes(self):
        for count in (0, 1, 25):
            decision = detect_change(None, count, first_observation=True)
            assert decision == ChangeDecision(changed=False, record=True)

    def test_first_observation_ignores_stale_baseline(self):
        decision = detect_change(3, 10, first_observation=True)
        assert decision.changed is False
        assert decision.record is True

    def test_different_count_changes(self):
        decision = detect_change(5, 6, first_observation=False)
        assert decision.changed is True
        assert decision.record is True

    def test_same_count_unchanged(self):
        decision = detect_change(5, 5, first_observation=False)
        assert decision.changed is False
        assert decision.record is False

    def test_fewer_items_also_counts_as_change(self):
        assert detect_change(5, 4, first_observation=False).changed is True

    def test_signatures(self):
        assert detect_change('abc', 'abd', first_observation=False).changed is True
        assert detect_change('abc', 'abc', first_observation=False).changed is False


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
