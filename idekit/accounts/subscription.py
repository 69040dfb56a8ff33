"""Remote subscription lookup for the active access token."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from idekit.config.schema import DEFAULT_PROFILE_URL

_MEMBERSHIP_LABELS = {
    "pro": "Pro",
    "free_trial": "Free Trial",
    "pro_trial": "Pro Trial",
    "team": "Team",
    "enterprise": "Enterprise",
}


@dataclass(slots=True)
class SubscriptionInfo:
    success: bool
    subscription_type: str | None = None
    days_remaining: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "subscriptionType": self.subscription_type,
            "daysRemaining": self.days_remaining,
        }


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def _plan_label(plan: str) -> str:
    lowered = plan.lower()
    if "pro" in lowered and "trial" not in lowered:
        return "Pro"
    if "pro_trial" in lowered:
        return "Pro Trial"
    if "free_trial" in lowered:
        return "Free Trial"
    if "team" in lowered:
        return "Team"
    if "enterprise" in lowered:
        return "Enterprise"
    return plan


def classify_profile(profile: dict[str, Any]) -> SubscriptionInfo:
    """Turn a profile payload into a display label and trial days remaining."""
    label: str | None = None
    if "membershipType" in profile:
        membership = str(profile.get("membershipType") or "")
        status = str(profile.get("subscriptionStatus") or "")
        if status == "active":
            if membership:
                label = _MEMBERSHIP_LABELS.get(membership, _capitalize(membership))
        elif status:
            label = f"{_capitalize(membership)} ({status})"
    elif "subscription" in profile:
        subscription = profile.get("subscription") or {}
        plan = str(((subscription.get("plan") or {}).get("nickname")) or "Unknown")
        status = str(subscription.get("status") or "unknown")
        label = _plan_label(plan) if status == "active" else f"{plan} ({status})"

    days = profile.get("daysRemainingOnTrial")
    return SubscriptionInfo(
        success=True,
        subscription_type=label,
        days_remaining=int(days) if isinstance(days, (int, float)) else None,
    )


class SubscriptionClient:
    """Fetches the account profile with a bearer token."""

    def __init__(
        self,
        *,
        profile_url: str = DEFAULT_PROFILE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.profile_url = profile_url
        self.timeout_seconds = max(0.5, float(timeout_seconds))
        self._transport = transport

    def fetch(self, token: str | None) -> SubscriptionInfo:
        if not token:
            return SubscriptionInfo(success=False)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = client.get(self.profile_url, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"subscription lookup failed: {e}")
            return SubscriptionInfo(success=False)
        if not isinstance(payload, dict):
            return SubscriptionInfo(success=False)
        return classify_profile(payload)
