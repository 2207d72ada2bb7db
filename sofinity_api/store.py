from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from sofinity_api.config import Settings
from sofinity_api.errors import StoreError

logger = logging.getLogger(__name__)


def _error_message(r: requests.Response) -> str:
    # PostgREST errors look like {"code": ..., "message": ..., "details": ..., "hint": ...}
    try:
        body = r.json()
    except ValueError:
        return (r.text or f"HTTP {r.status_code}")[:500]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {r.status_code}"


class SupabaseStore:
    """Minimal PostgREST client for the tables the backfill touches."""

    def __init__(self, url: str, service_key: str, timeout: float = 20.0, session: Optional[requests.Session] = None):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStore":
        settings.require_store()
        return cls(settings.supabase_url, settings.supabase_service_role_key, timeout=settings.store_timeout_s)

    def _request(self, method: str, table: str, *, params: Optional[Dict[str, Any]] = None, json: Any = None, prefer: Optional[str] = None) -> Any:
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            r = self.session.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StoreError(f"{type(e).__name__}: {str(e)[:300]}") from e

        logger.debug("store %s %s -> %s", method, table, r.status_code)
        if r.status_code >= 400:
            raise StoreError(_error_message(r), status_code=r.status_code)
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON from {table}: {(r.text or '')[:200]}", status_code=r.status_code) from e

    def fetch_profiles(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self._request("GET", "profiles", params={"select": "user_id,name,email", "limit": limit}) or []

    def fetch_contests(self) -> List[Dict[str, Any]]:
        return self._request("GET", "contests", params={"select": "id,title"}) or []

    def insert_events(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Bulk insert into EventLogs; returns the stored rows with their ids."""
        return self._request(
            "POST",
            "EventLogs",
            params={"select": "id,event_name,metadata"},
            json=rows,
            prefer="return=representation",
        ) or []

    def insert_audit_log(self, row: Dict[str, Any]) -> None:
        self._request("POST", "audit_logs", json=row, prefer="return=minimal")

    def fetch_recent_events(self, limit: int = 1000) -> List[Dict[str, Any]]:
        return self._request(
            "GET",
            "EventLogs",
            params={"select": "event_name,metadata,timestamp", "order": "timestamp.desc", "limit": limit},
        ) or []
