"""Tests for the Supabase REST client."""

import pytest
import requests

from conftest import FakeResponse, FakeSession
from sofinity_api.config import Settings
from sofinity_api.errors import ConfigurationError, StoreError
from sofinity_api.store import SupabaseStore


def _store(*responses):
    session = FakeSession(responses)
    return SupabaseStore("https://abc.supabase.co/", "service-key", timeout=5, session=session), session


class TestSupabaseStore:
    def test_from_settings_requires_credentials(self):
        with pytest.raises(ConfigurationError, match="Missing Supabase configuration"):
            SupabaseStore.from_settings(Settings(supabase_url="https://abc.supabase.co"))

    def test_fetch_profiles(self):
        store, session = _store(FakeResponse(payload=[{"user_id": "u1"}]))

        assert store.fetch_profiles(limit=10) == [{"user_id": "u1"}]
        req = session.requests[0]
        assert req["method"] == "GET"
        assert req["url"] == "https://abc.supabase.co/rest/v1/profiles"
        assert req["params"] == {"select": "user_id,name,email", "limit": 10}
        assert req["headers"]["apikey"] == "service-key"
        assert req["headers"]["Authorization"] == "Bearer service-key"
        assert req["timeout"] == 5

    def test_insert_events_asks_for_representation(self):
        stored = [{"id": "e1", "event_name": "prize_won", "metadata": {}}]
        store, session = _store(FakeResponse(status_code=201, payload=stored))

        assert store.insert_events([{"event_name": "prize_won"}]) == stored
        req = session.requests[0]
        assert req["url"].endswith("/EventLogs")
        assert req["params"] == {"select": "id,event_name,metadata"}
        assert req["headers"]["Prefer"] == "return=representation"
        assert req["json"] == [{"event_name": "prize_won"}]

    def test_audit_insert_with_empty_body(self):
        store, session = _store(FakeResponse(status_code=201))

        assert store.insert_audit_log({"event_name": "x"}) is None
        assert session.requests[0]["headers"]["Prefer"] == "return=minimal"

    def test_postgrest_error_message_is_surfaced(self):
        store, _ = _store(FakeResponse(status_code=400, payload={"code": "23502", "message": "null value in column"}))

        with pytest.raises(StoreError) as exc:
            store.insert_events([{}])

        assert exc.value.message == "null value in column"
        assert exc.value.status_code == 400

    def test_non_json_error_body(self):
        store, _ = _store(FakeResponse(status_code=502, text="Bad Gateway"))

        with pytest.raises(StoreError, match="Bad Gateway"):
            store.fetch_contests()

    def test_transport_error_becomes_store_error(self):
        store, _ = _store(requests.ConnectionError("refused"))

        with pytest.raises(StoreError, match="ConnectionError"):
            store.fetch_recent_events()

    def test_unparseable_success_body_is_store_error(self):
        store, _ = _store(FakeResponse(status_code=200, text="<html>maintenance</html>"))

        with pytest.raises(StoreError, match="Invalid JSON from contests: <html>maintenance</html>") as exc:
            store.fetch_contests()

        assert exc.value.status_code == 200
