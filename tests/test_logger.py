"""
Tests for logging setup.
"""

import pytest
import logging

from utils.logger import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_level_and_file_from_settings(self, tmp_path):
        log_file = tmp_path / 'gradewatch.log'
        settings = {'logging': {'level': 'warning', 'format': '%(message)s', 'file': str(log_file)}}

        root = setup_logging(settings)
        logging.getLogger('GradeMonitor').warning('grades changed')
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.WARNING
        assert len(root.handlers) == 2
        assert log_file.read_text(encoding='utf-8') == 'grades changed\n'

    def test_verbose_overrides_level(self):
        root = setup_logging({'logging': {'level': 'ERROR'}}, verbose=True)

        assert root.level == logging.DEBUG
        assert logging.getLogger('urllib3').level == logging.WARNING

    def test_missing_section_uses_defaults(self):
        root = setup_logging({'logging': None})

        assert root.level == logging.INFO
        assert len(root.handlers) == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
