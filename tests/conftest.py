"""
Pytest configuration and fixtures.
"""

import pytest
import os
import sys
import json
from unittest.mock import Mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.fetch_result import FetchResult


def make_item(score, credit, course, grade_point=None, name='Zhang San'):
    item = {'bfzcj': str(score), 'xf': str(credit), 'kcmc': course, 'xm': name}
    if grade_point is not None:
        item['jd'] = str(grade_point)
    return item


def make_body(items):
    return json.dumps({'items': items, 'totalResult': len(items)}, ensure_ascii=False)


def make_response(text='', status_code=200, headers=None):
    """Mock requests.Response that passes raise_for_status."""
    response = Mock()
    response.text = text
    response.status_code = status_code
    response.headers = headers or {'Content-Type': 'application/json'}
    response.raise_for_status = Mock()
    return response


def ok_fetch(body):
    return FetchResult(url='https://jw.example.edu.cn/cjcx', body=body, status_code=200)


@pytest.fixture
def sample_items():
    return [
        make_item(80, 2, 'Physics', 3.0),
        make_item(90, 3, 'Calculus', 4.0),
    ]


@pytest.fixture
def sample_body(sample_items):
    return make_body(sample_items)


@pytest.fixture
def settings_files(tmp_path):
    """Write minimal valid settings and subjects files, return their paths."""
    settings_path = tmp_path / 'settings.yaml'
    subjects_path = tmp_path / 'subjects.yaml'
    settings_path.write_text(
        "source:\n"
        "  request_url: 'https://jw.example.edu.cn/cjcx/cjcx_cxXsgrcj.html?doType=query&su='\n"
        "polling:\n"
        "  check_delay: 30\n"
        "  subject_delay: 1\n"
        "channels:\n"
        "  - type: webhook\n"
        "    url: 'https://hooks.example.com/notify?chat_id=1'\n",
        encoding='utf-8'
    )
    subjects_path.write_text(
        "- id: '2020000001'\n"
        "  credential: 'route=abc; JSESSIONID=111'\n"
        "  push_target: 'zhangsan'\n"
        "- id: '2020000002'\n"
        "  credential: 'route=abc; JSESSIONID=222'\n",
        encoding='utf-8'
    )
    return str(settings_path), str(subjects_path)
