"""
Grade Monitor - Drives the poll, diff and notify loop over all subjects.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from core.change_detector import detect_change
from core.dispatcher import NotificationDispatcher
from core.extractor import RecordExtractor
from core.registry import SubjectRegistry
from core.state_manager import StateManager
from fetchers.base_fetcher import BaseFetcher
from fetchers.grade_fetcher import GradeFetcher
from fetchers.http_client import HTTPClient
from models.delivery_result import DeliveryResult
from models.grade import ObservationSnapshot
from models.notification import Notification
from models.poll_result import PollResult
from models.subject import Subject
from utils.debug_dump import dump_path_for, write_debug_payload
from utils.exceptions import EmptyResultError, ParseError

TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


class GradeMonitor:
    """Polls every subject in turn and notifies when its grade list changes."""

    def __init__(
        self,
        registry: SubjectRegistry = None,
        fetcher: BaseFetcher = None,
        extractor: RecordExtractor = None,
        state_manager: StateManager = None,
        dispatcher: NotificationDispatcher = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the monitor.

        Configuration is validated here, before any polling starts; this is
        the only place a ConfigurationError can escape.

        Args:
            registry: Subject and settings registry
            fetcher: Upstream fetcher (built from settings when omitted)
            extractor: Payload parser
            state_manager: Per-subject baseline store
            dispatcher: Notification broadcaster (built from configured channels)
            sleep: Sleep function, replaced in tests
        """
        self.registry = registry or SubjectRegistry()
        self.registry.validate()
        self.settings = self.registry.get_settings()
        self.logger = logging.getLogger('GradeMonitor')

        client = None
        if fetcher is None or dispatcher is None:
            client = HTTPClient(self.settings)

        self.fetcher = fetcher or GradeFetcher(
            self.registry.get_source_config(), self.settings, client
        )
        self.extractor = extractor or RecordExtractor(self.settings.get('fields'))
        self.state_manager = state_manager or StateManager(
            (self.settings.get('state') or {}).get('file')
        )
        self.dispatcher = dispatcher or NotificationDispatcher(
            self.registry.get_channels(client)
        )
        self._sleep = sleep

        polling = self.settings['polling']
        self.check_delay = float(polling['check_delay'])
        self.subject_delay = float(polling['subject_delay'])
        self.change_key = polling.get('change_key', 'count')

        debug_settings = self.settings.get('debug') or {}
        self.debug = bool(debug_settings.get('enabled'))
        self.debug_path = debug_settings.get('dump_path') or 'debug.json'

        self.rounds_completed = 0

    def check_subject(self, subject: Subject, round_time: datetime = None) -> PollResult:
        """
        Run fetch, extract, detect and notify for one subject.

        Transport and parse failures end the turn with an error result and
        leave the subject's baseline untouched.

        Args:
            subject: Subject to poll
            round_time: Timestamp of the current round

        Returns:
            PollResult for this turn
        """
        round_time = round_time or datetime.now()
        subject_id = subject.subject_id
        self.logger.info(f"Checking grades: {subject_id}")

        fetch_result = self.fetcher.fetch(subject)
        if not fetch_result.is_success:
            return PollResult(
                subject_id=subject_id,
                error=f"Network error: {fetch_result.error_message}",
                check_time=round_time
            )

        try:
            payload = self.extractor.parse_payload(fetch_result.body)
            if self.debug:
                self._dump_payload(subject, payload)
            snapshot = self.extractor.extract_from_payload(payload)
        except EmptyResultError:
            self.logger.info(f"No grades yet for {subject_id}")
            return PollResult(
                subject_id=subject_id,
                no_data=True,
                previous_count=self.state_manager.get_last_count(subject_id),
                check_time=round_time
            )
        except ParseError as e:
            self.logger.warning(f"Could not parse response for {subject_id}: {e}")
            return PollResult(
                subject_id=subject_id,
                error=f"Parse error: {e}",
                check_time=round_time
            )

        state = self.state_manager.get_state(subject_id)
        if self.change_key == 'signature':
            previous, current = state.last_signature, snapshot.signature
        else:
            previous, current = state.last_count, snapshot.item_count

        decision = detect_change(previous, current, state.first_observation)
        if decision.record:
            self.state_manager.record_observation(
                subject_id, snapshot.item_count, snapshot.signature
            )

        result = PollResult(
            subject_id=subject_id,
            snapshot=snapshot,
            changed=decision.changed,
            first_observation=state.first_observation,
            previous_count=state.last_count,
            current_count=snapshot.item_count,
            check_time=round_time
        )

        if decision.changed:
            result.deliveries = self.notify(subject, snapshot, round_time)

        self.logger.info(
            f"Result for {subject_id}: status={result.status}, items={snapshot.item_count}"
        )
        return result

    def format_message(self, round_time: datetime, snapshot: ObservationSnapshot) -> str:
        return f"[{round_time.strftime(TIME_FORMAT)}]\n{snapshot.format_report()}"

    def notify(
        self,
        subject: Subject,
        snapshot: ObservationSnapshot,
        round_time: datetime
    ) -> List[DeliveryResult]:
        """Broadcast a grade update for one subject."""
        if not self.dispatcher.has_channels:
            self.logger.info(f"Grades changed for {subject.subject_id}, no channels configured")
            return []

        self.logger.info(f"Pushing notification for {subject.subject_id}")
        notification = Notification(
            text=self.format_message(round_time, snapshot),
            subject_id=subject.subject_id,
            recipient=subject.push_target,
            created_at=round_time
        )
        return self.dispatcher.dispatch(notification)

    def run_round(self) -> List[PollResult]:
        """
        Check every subject once, in configured order.

        Returns:
            One PollResult per subject
        """
        round_time = datetime.now()
        print(f"[{round_time.strftime(TIME_FORMAT)}]")

        results = []
        for index, subject in enumerate(self.registry.get_subjects()):
            if index:
                # pause between subjects only
                self._sleep(self.subject_delay)

            try:
                result = self.check_subject(subject, round_time)
            except Exception as e:
                self.logger.exception(f"Unexpected error while checking {subject.subject_id}")
                result = PollResult(
                    subject_id=subject.subject_id,
                    error=f"{type(e).__name__}: {e}",
                    check_time=round_time
                )

            print(result)
            results.append(result)

        self.rounds_completed += 1
        return results

    def wait(self, seconds: float) -> None:
        print(f"{'=' * 15}Wait {seconds:g}s{'=' * 15}")
        self._sleep(seconds)

    def run_forever(self, max_rounds: Optional[int] = None) -> None:
        """
        Poll until the process is stopped.

        Args:
            max_rounds: Stop after this many rounds (None runs forever)
        """
        self.logger.info(
            f"Monitoring {len(self.registry.get_subjects())} subjects, "
            f"{len(self.dispatcher.channels)} channels, every {self.check_delay:g}s"
        )

        rounds = 0
        while max_rounds is None or rounds < max_rounds:
            self.run_round()
            rounds += 1
            if max_rounds is not None and rounds >= max_rounds:
                break
            self.wait(self.check_delay)

    def _dump_payload(self, subject: Subject, payload: dict) -> None:
        per_subject = len(self.registry.get_subjects()) > 1
        path = dump_path_for(self.debug_path, subject.subject_id, per_subject)
        write_debug_payload(payload, path)
