"""Missing-events workflow.

Seeds EventLogs with a week of synthetic OneMil events, then checks the
metadata of every row the store handed back and reports the outcome.

One pass, no retries:

    profiles -> contests -> generate -> batch insert -> validate -> audit row

Running it twice inserts two unrelated batches. That is intended: it is a
seeding tool, not a sync.
"""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from sofinity_api.config import Settings
from sofinity_api.errors import AuditWriteError, ConfigurationError, PersistenceError, StoreError
from sofinity_api.templates import EVENT_TEMPLATES, EventTemplate
from sofinity_api.validation import ValidationResult, validate_event

logger = logging.getLogger(__name__)

MAX_PROFILES = 10
LOOKBACK_DAYS = 7
MIN_EVENTS_PER_TEMPLATE = 1
MAX_EVENTS_PER_TEMPLATE = 3

AUDIT_EVENT_NAME = "missing_events_workflow_completed"
AUDIT_USER_AGENT = "fix-missing-events-function"


class WorkflowReport(BaseModel):
    total_events_generated: int
    events_by_type: Dict[str, int]
    validation_results: List[ValidationResult]
    total_validation_errors: int
    execution_time_ms: int


def elapsed_ms(started: float) -> int:
    return int((time.time() - started) * 1000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MissingEventsWorkflow:
    def __init__(
        self,
        settings: Settings,
        store: Any,
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = utc_now,
        templates: Optional[List[EventTemplate]] = None,
    ):
        self.settings = settings
        self.store = store
        # unseeded in production; tests pass random.Random(seed)
        self.rng = rng or random.Random()
        self.now = now
        self.templates = templates if templates is not None else EVENT_TEMPLATES

    def load_profiles(self) -> List[Dict[str, Any]]:
        try:
            profiles = self.store.fetch_profiles(limit=MAX_PROFILES)
        except StoreError as e:
            raise ConfigurationError(f"No users found in profiles table ({e})") from e
        if not profiles:
            raise ConfigurationError("No users found in profiles table")
        return profiles

    def resolve_contest_id(self) -> str:
        try:
            contests = self.store.fetch_contests()
        except StoreError as e:
            logger.warning("Could not read contests, falling back to %s: %s", self.settings.fallback_contest_id, e)
            contests = []
        if contests and contests[0].get("id"):
            return contests[0]["id"]
        return self.settings.fallback_contest_id

    def generate_events(self, profiles: List[Dict[str, Any]], contest_id: str) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """Build the EventLogs rows for the lookback window (today included)."""
        rows: List[Dict[str, Any]] = []
        by_type: Dict[str, int] = {}
        today = self.now()

        for day in range(LOOKBACK_DAYS):
            event_date = today - timedelta(days=day)
            for template in self.templates:
                count = self.rng.randint(MIN_EVENTS_PER_TEMPLATE, MAX_EVENTS_PER_TEMPLATE)
                for _ in range(count):
                    profile = self.rng.choice(profiles)
                    event_time = event_date.replace(hour=self.rng.randrange(24), minute=self.rng.randrange(60))
                    rows.append(
                        {
                            "user_id": profile["user_id"],
                            "project_id": self.settings.project_id,
                            "contest_id": contest_id,
                            "event_name": template.event_name,
                            "metadata": template.generate_metadata(self.rng, profile["user_id"], contest_id),
                            "timestamp": event_time.isoformat(),
                        }
                    )
                    by_type[template.event_name] = by_type.get(template.event_name, 0) + 1

        return rows, by_type

    def insert_events(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        try:
            return self.store.insert_events(rows)
        except StoreError as e:
            logger.error("Error inserting events: %s", e)
            raise PersistenceError(f"Failed to insert events: {e}") from e

    def write_audit(self, report: WorkflowReport) -> None:
        try:
            self.store.insert_audit_log(
                {
                    "event_name": AUDIT_EVENT_NAME,
                    "user_id": None,
                    "project_id": self.settings.project_id,
                    "event_data": report.model_dump(mode="json"),
                    "ip_address": None,
                    "user_agent": AUDIT_USER_AGENT,
                }
            )
        except StoreError as e:
            raise AuditWriteError(f"Failed to log audit event: {e}") from e

    def run(self, started: Optional[float] = None) -> WorkflowReport:
        started = started if started is not None else time.time()
        logger.info("Starting missing events workflow")

        profiles = self.load_profiles()
        contest_id = self.resolve_contest_id()
        logger.info("Found %d users and contest ID: %s", len(profiles), contest_id)

        rows, by_type = self.generate_events(profiles, contest_id)
        logger.info("Generated %d events: %s", len(rows), by_type)

        inserted = self.insert_events(rows)
        logger.info("Successfully inserted %d events", len(inserted))

        results = [validate_event(event) for event in inserted]
        invalid = sum(1 for r in results if not r.is_valid)
        logger.info("Validation completed: %d/%d passed", len(results) - invalid, len(results))

        report = WorkflowReport(
            total_events_generated=len(rows),
            events_by_type=by_type,
            validation_results=results,
            total_validation_errors=invalid,
            execution_time_ms=elapsed_ms(started),
        )

        try:
            self.write_audit(report)
        except AuditWriteError as e:
            logger.error("%s", e)

        logger.info("Workflow completed successfully")
        return report
