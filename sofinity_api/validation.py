from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel

# Presence-only checks; timestamp/amount types are checked for every event type.
REQUIRED_FIELDS: Dict[str, List[str]] = {
    "user_registered": ["registration_method", "device_type", "timestamp"],
    "voucher_purchased": ["voucher_id", "amount", "currency", "payment_method"],
    "coin_redeemed": ["coins_amount", "reward_type", "reward_value"],
    "contest_closed": ["contest_id", "total_participants", "closure_reason"],
    "prize_won": ["prize_id", "prize_type", "prize_value", "contest_id"],
    "notification_sent": ["notification_type", "template_id", "delivery_status"],
}


class ValidationResult(BaseModel):
    event_name: str
    event_id: str
    is_valid: bool = True
    validation_errors: List[str] = []
    metadata_keys: List[str] = []


def required_fields_for(event_name: str) -> List[str]:
    return REQUIRED_FIELDS.get(event_name, [])


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_event(event: Dict[str, Any]) -> ValidationResult:
    """Check one stored EventLogs row ({id, event_name, metadata})."""
    result = ValidationResult(event_name=str(event.get("event_name") or ""), event_id=str(event.get("id") or ""))
    metadata = event.get("metadata")

    if not isinstance(metadata, dict):
        result.is_valid = False
        result.validation_errors.append("Metadata is not a valid JSON object")
        return result

    result.metadata_keys = list(metadata.keys())

    for field in required_fields_for(result.event_name):
        if field not in metadata:
            result.validation_errors.append(f"Missing required field: {field}")

    if "timestamp" in metadata and not isinstance(metadata["timestamp"], str):
        result.validation_errors.append("timestamp must be a string")

    if "amount" in metadata and not _is_number(metadata["amount"]):
        result.validation_errors.append("amount must be a number")

    result.is_valid = not result.validation_errors
    return result
