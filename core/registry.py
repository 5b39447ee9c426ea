"""
Subject Registry - Loads settings, subjects and channel configuration.
"""

import copy
import os
import yaml
from typing import Dict, Any, List, Mapping, Optional, Type

from dotenv import load_dotenv

from channels.base_channel import BaseChannel
from channels.webhook_channel import WebhookChannel
from channels.wecom_channel import WeComChannel
from fetchers.http_client import HTTPClient
from models.subject import Subject
from utils.exceptions import ConfigurationError

# Load environment variables
load_dotenv()

DEFAULT_SETTINGS: Dict[str, Any] = {
    'source': {
        'request_url': '',
        'page_size': 5000,
        'user_agent': None,
    },
    'polling': {
        'check_delay': 600,
        'subject_delay': 1,
        'change_key': 'count',
    },
    'http': {
        'connect_timeout': 5,
        'read_timeout': 5,
        'max_retries': 1,
        'proxy': None,
        'ca_bundle': None,
    },
    'debug': {
        'enabled': False,
        'dump_path': 'debug.json',
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'file': None,
    },
    'state': {
        'file': None,
    },
    'channels': [],
}

TEMPLATE_SUBJECTS = [
    {'id': '0000000001', 'credential': 'route=; JSESSIONID=', 'push_target': ''},
    {'id': '0000000002', 'credential': 'route=; JSESSIONID=', 'push_target': ''},
]

TEMPLATE_CHANNELS = [
    {'type': 'webhook', 'url': 'https://api.telegram.org/bot<token>/sendMessage?chat_id=<chat>'},
    {'type': 'wecom', 'corp_id': '', 'corp_secret': '', 'agent_id': 0},
]

CHANGE_KEYS = ('count', 'signature')


def deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if value is None and key in merged:
            # an empty YAML section keeps its defaults
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _split(value: str, sep: str = ',') -> List[str]:
    return [part.strip() for part in value.split(sep)]


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _is_type(channel: Any, channel_type: str) -> bool:
    return isinstance(channel, dict) and channel.get('type') == channel_type


class SubjectRegistry:
    """Registry that manages subjects, settings and channel instantiation."""

    # Map channel types to channel classes
    CHANNEL_MAP: Dict[str, Type[BaseChannel]] = {
        'webhook': WebhookChannel,
        'wecom': WeComChannel,
    }

    def __init__(
        self,
        settings_path: str = None,
        subjects_path: str = None,
        environ: Mapping[str, str] = None
    ):
        """
        Initialize the registry with configuration files.

        Args:
            settings_path: Path to settings.yaml
            subjects_path: Path to subjects.yaml
            environ: Environment used for overrides (defaults to os.environ)
        """
        self.base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

        if settings_path is None:
            settings_path = os.path.join(self.base_dir, 'config', 'settings.yaml')
        if subjects_path is None:
            subjects_path = os.path.join(self.base_dir, 'config', 'subjects.yaml')

        self.settings_path = settings_path
        self.subjects_path = subjects_path

        raw_settings = self._load_config(settings_path)
        if not isinstance(raw_settings, dict):
            raise ConfigurationError(f"{settings_path} must contain a mapping")
        self.settings = deep_merge(DEFAULT_SETTINGS, raw_settings)
        for section, default in DEFAULT_SETTINGS.items():
            if isinstance(default, dict) and not isinstance(self.settings[section], dict):
                raise ConfigurationError(f"{settings_path}: section '{section}' must be a mapping")

        raw_subjects = self._load_config(subjects_path) or []
        if isinstance(raw_subjects, dict):
            raw_subjects = raw_subjects.get('subjects') or []
        if not isinstance(raw_subjects, list):
            raise ConfigurationError(f"{subjects_path} must contain a list of subjects")
        self.subjects: List[Subject] = []
        self._subject_problems: List[str] = []
        for index, entry in enumerate(raw_subjects):
            if not isinstance(entry, dict):
                self._subject_problems.append(f"subject #{index + 1} must be a mapping")
                continue
            raw_id = entry.get('id')
            if raw_id is not None and not isinstance(raw_id, str):
                # YAML reads 0000000001 as the integer 1
                self._subject_problems.append(
                    f"subject #{index + 1} id {raw_id!r} must be quoted"
                )
            self.subjects.append(Subject.from_dict(entry))

        self._apply_env_overrides(os.environ if environ is None else environ)

    def _load_config(self, path: str) -> Any:
        """Load a YAML configuration file; a missing file counts as empty."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            return {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing YAML file {path}: {e}") from e

    def _apply_env_overrides(self, environ: Mapping[str, str]) -> None:
        """Let container deployments configure everything through the environment."""
        if environ.get('GRADEWATCH_REQUEST_URL'):
            self.settings['source']['request_url'] = environ['GRADEWATCH_REQUEST_URL']
        if environ.get('GRADEWATCH_USER_AGENT'):
            self.settings['source']['user_agent'] = environ['GRADEWATCH_USER_AGENT']
        if environ.get('GRADEWATCH_CHECK_DELAY'):
            self.settings['polling']['check_delay'] = environ['GRADEWATCH_CHECK_DELAY']
        if environ.get('GRADEWATCH_DEBUG'):
            self.settings['debug']['enabled'] = _as_bool(environ['GRADEWATCH_DEBUG'])

        if environ.get('GRADEWATCH_SUBJECT_IDS'):
            ids = _split(environ['GRADEWATCH_SUBJECT_IDS'])
            separator = environ.get('GRADEWATCH_CREDENTIAL_SEP') or ','
            credentials = _split(environ.get('GRADEWATCH_CREDENTIALS', ''), separator)
            targets = _split(environ.get('GRADEWATCH_PUSH_TARGETS', ''))
            if len(credentials) != len(ids):
                raise ConfigurationError(
                    f"GRADEWATCH_CREDENTIALS has {len(credentials)} entries "
                    f"for {len(ids)} subject ids"
                )
            self.subjects = [
                Subject(
                    subject_id=subject_id,
                    credential=credentials[index],
                    push_target=targets[index] if index < len(targets) and targets[index] else None
                )
                for index, subject_id in enumerate(ids)
            ]
            self._subject_problems = []

        channels = self.settings['channels']
        if not isinstance(channels, list):
            return
        if environ.get('GRADEWATCH_WEBHOOK_URL'):
            channels = [c for c in channels if not _is_type(c, 'webhook')]
            channels.append({'type': 'webhook', 'url': environ['GRADEWATCH_WEBHOOK_URL']})
        if environ.get('GRADEWATCH_WECOM_CORP_ID'):
            channels = [c for c in channels if not _is_type(c, 'wecom')]
            channels.append({
                'type': 'wecom',
                'corp_id': environ['GRADEWATCH_WECOM_CORP_ID'],
                'corp_secret': environ.get('GRADEWATCH_WECOM_CORP_SECRET', ''),
                'agent_id': environ.get('GRADEWATCH_WECOM_AGENT_ID', 0),
            })
        self.settings['channels'] = channels

    def validate(self) -> None:
        """
        Check that the configuration can drive the polling loop.

        Raises:
            ConfigurationError: listing every problem found
        """
        problems = list(self._subject_problems)

        if not self.settings['source'].get('request_url'):
            problems.append("source.request_url is required")

        if not self.subjects:
            problems.append("at least one subject is required")
        seen = set()
        for index, subject in enumerate(self.subjects):
            if not subject.subject_id:
                problems.append(f"subject #{index + 1} has no id")
            elif subject.subject_id in seen:
                problems.append(f"subject {subject.subject_id} is listed twice")
            seen.add(subject.subject_id)
            if not subject.credential:
                problems.append(f"subject {subject.subject_id or index + 1} has no credential")

        polling = self.settings['polling']
        for key in ('check_delay', 'subject_delay'):
            try:
                if float(polling.get(key)) < 0:
                    problems.append(f"polling.{key} must not be negative")
            except (TypeError, ValueError):
                problems.append(f"polling.{key} must be a number")
        if polling.get('change_key') not in CHANGE_KEYS:
            problems.append(f"polling.change_key must be one of {', '.join(CHANGE_KEYS)}")

        if not isinstance(self.settings['channels'], list):
            problems.append("channels must be a list")
        else:
            for index, channel in enumerate(self.settings['channels']):
                problems.extend(self._validate_channel(index, channel))

        if problems:
            raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

    def _validate_channel(self, index: int, channel: Any) -> List[str]:
        if not isinstance(channel, dict):
            return [f"channel #{index + 1} must be a mapping"]

        channel_type = channel.get('type')
        if channel_type not in self.CHANNEL_MAP:
            return [f"channel #{index + 1} has unknown type '{channel_type}'"]

        if channel_type == 'webhook' and not channel.get('url'):
            return [f"webhook channel #{index + 1} needs a url"]
        if channel_type == 'wecom':
            missing = [k for k in ('corp_id', 'corp_secret', 'agent_id') if not channel.get(k)]
            if missing:
                return [f"wecom channel #{index + 1} is missing {', '.join(missing)}"]
        return []

    def get_subjects(self) -> List[Subject]:
        return list(self.subjects)

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        for subject in self.subjects:
            if subject.subject_id == subject_id:
                return subject
        return None

    def list_subjects(self) -> List[str]:
        """List all configured subject ids."""
        return [subject.subject_id for subject in self.subjects]

    def get_settings(self) -> Dict[str, Any]:
        """Get application settings."""
        return self.settings

    def get_source_config(self) -> Dict[str, Any]:
        return self.settings['source']

    def get_channels(self, client: HTTPClient = None) -> List[BaseChannel]:
        """Instantiate every configured channel, sharing one HTTP client."""
        client = client or HTTPClient(self.settings)
        channels = []
        for channel_config in self.settings['channels']:
            channel_class = self.CHANNEL_MAP[channel_config['type']]
            channels.append(channel_class(channel_config, self.settings, client))
        return channels

    def write_default_config(self) -> List[str]:
        """
        Write template settings and subjects files where none exist.

        Returns:
            Paths of the files that were created
        """
        written = []
        templates = (
            (self.settings_path, deep_merge(DEFAULT_SETTINGS, {'channels': TEMPLATE_CHANNELS})),
            (self.subjects_path, TEMPLATE_SUBJECTS),
        )
        for path, content in templates:
            if os.path.exists(path):
                continue
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(content, f, sort_keys=False, allow_unicode=True)
            written.append(path)
        return written
