"""Pytest configuration and fixtures."""

import json
import random
import uuid

import pytest
from fastapi.testclient import TestClient

from sofinity_api.config import Settings, get_settings
from sofinity_api.errors import StoreError
from sofinity_api.main import app, get_random, get_store_factory


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is not None:
            self.text = text
        else:
            self.text = json.dumps(payload) if payload is not None else ""
        self.content = self.text.encode()

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


class FakeStore:
    """In-memory stand-in for SupabaseStore."""

    def __init__(self, profiles=None, contests=None, recent_events=None, fail_profiles=None, fail_contests=None, fail_insert=None, fail_audit=None):
        self.profiles = profiles if profiles is not None else [
            {"user_id": f"user-{i}", "name": f"User {i}", "email": f"user{i}@onemil.cz"} for i in range(3)
        ]
        self.contests = contests if contests is not None else [{"id": "contest-1", "title": "Summer Contest"}]
        self.recent_events = recent_events or []
        self.fail_profiles = fail_profiles
        self.fail_contests = fail_contests
        self.fail_insert = fail_insert
        self.fail_audit = fail_audit
        self.calls = []
        self.event_log = []
        self.audit_logs = []

    def fetch_profiles(self, limit=10):
        self.calls.append("fetch_profiles")
        if self.fail_profiles:
            raise StoreError(self.fail_profiles, status_code=500)
        return self.profiles[:limit]

    def fetch_contests(self):
        self.calls.append("fetch_contests")
        if self.fail_contests:
            raise StoreError(self.fail_contests, status_code=500)
        return self.contests

    def insert_events(self, rows):
        self.calls.append("insert_events")
        if self.fail_insert:
            raise StoreError(self.fail_insert, status_code=400)
        stored = []
        for row in rows:
            # round-trip through JSON like the real store does
            stored.append({**json.loads(json.dumps(row)), "id": str(uuid.uuid4())})
        self.event_log.extend(stored)
        return [{"id": r["id"], "event_name": r["event_name"], "metadata": r["metadata"]} for r in stored]

    def insert_audit_log(self, row):
        self.calls.append("insert_audit_log")
        if self.fail_audit:
            raise StoreError(self.fail_audit, status_code=500)
        self.audit_logs.append(json.loads(json.dumps(row)))

    def fetch_recent_events(self, limit=1000):
        self.calls.append("fetch_recent_events")
        return self.recent_events[:limit]


@pytest.fixture
def settings():
    return Settings(supabase_url="https://store.test", supabase_service_role_key="service-key")


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_client():
    """Build a TestClient wired to the given settings and store."""

    def _make(settings, store, seed=1234):
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_store_factory] = lambda: (lambda s: store)
        app.dependency_overrides[get_random] = lambda: random.Random(seed)
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
