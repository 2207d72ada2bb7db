"""Metadata generators for the six OneMil event types.

Each generator takes the random source, the chosen user id and the run's
contest id and returns a fresh metadata dict. Values are plausible, not real.
"""

from __future__ import annotations

import random
import string
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, NamedTuple, Optional

MetadataGenerator = Callable[[random.Random, str, Optional[str]], Dict[str, Any]]

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def _token(rng: random.Random, length: int = 6) -> str:
    return "".join(rng.choice(_TOKEN_ALPHABET) for _ in range(length))


def _user_registered(rng: random.Random, user_id: str, contest_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "registration_method": "email" if rng.random() > 0.5 else "social",
        "device_type": "mobile" if rng.random() > 0.6 else "desktop",
        "referral_source": "organic" if rng.random() > 0.7 else "campaign",
        "ip_address": f"192.168.{rng.randrange(255)}.{rng.randrange(255)}",
        "user_agent": "Mozilla/5.0 (compatible; OneMil/1.0)",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "welcome_email_sent": True,
    }


def _voucher_purchased(rng: random.Random, user_id: str, contest_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "voucher_id": f"voucher_{_token(rng)}",
        "voucher_type": rng.choice(["discount", "cashback", "bonus"]),
        "amount": rng.randint(50, 549),
        "currency": "CZK",
        "payment_method": rng.choice(["card", "bank_transfer", "paypal"]),
        "contest_id": contest_id,
        "purchase_channel": "web",
        "transaction_id": f"tx_{_token(rng)}",
    }


def _coin_redeemed(rng: random.Random, user_id: str, contest_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "coins_amount": rng.randint(100, 1099),
        "reward_type": rng.choice(["discount", "product", "service"]),
        "reward_value": rng.randint(25, 224),
        "contest_id": contest_id,
        "redemption_method": "app",
        "remaining_balance": rng.randint(0, 4999),
        "redemption_id": f"redeem_{_token(rng)}",
    }


def _contest_closed(rng: random.Random, user_id: str, contest_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "contest_id": contest_id,
        "total_participants": rng.randint(50, 549),
        "total_prizes_awarded": rng.randint(5, 24),
        "contest_duration_days": rng.randint(7, 36),
        "winning_criteria": "highest_score",
        "closure_reason": "completed",
        "final_statistics": {
            "total_entries": rng.randint(100, 1099),
            "unique_participants": rng.randint(30, 329),
        },
    }


def _prize_won(rng: random.Random, user_id: str, contest_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "prize_id": f"prize_{_token(rng)}",
        "prize_type": rng.choice(["cash", "voucher", "product", "experience"]),
        "prize_value": rng.randint(100, 4099),
        "contest_id": contest_id,
        "winning_position": rng.randint(1, 10),
        "prize_status": "pending_delivery",
        "notification_sent": True,
        "delivery_address_required": rng.random() > 0.5,
    }


def _notification_sent(rng: random.Random, user_id: str, contest_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "notification_type": rng.choice(["email", "push", "sms"]),
        "template_id": f"template_{rng.randint(1, 10)}",
        "subject": "OneMil Notification",
        "delivery_status": "delivered" if rng.random() > 0.1 else "failed",
        "contest_id": contest_id,
        "channel_preference": "automatic",
        "read_status": "read" if rng.random() > 0.4 else "unread",
        "click_through": rng.random() > 0.7,
    }


class EventTemplate(NamedTuple):
    event_name: str
    generate_metadata: MetadataGenerator


EVENT_TEMPLATES: List[EventTemplate] = [
    EventTemplate("user_registered", _user_registered),
    EventTemplate("voucher_purchased", _voucher_purchased),
    EventTemplate("coin_redeemed", _coin_redeemed),
    EventTemplate("contest_closed", _contest_closed),
    EventTemplate("prize_won", _prize_won),
    EventTemplate("notification_sent", _notification_sent),
]

EVENT_NAMES: List[str] = [t.event_name for t in EVENT_TEMPLATES]
