# services/checkout.py
"""
Checkout session requester + payment provider availability.

- is_provider_available() is re-read from env/config on every call (never cached)
- request_checkout() is the single async call the subscribe page makes; every
  failure comes back as a CheckoutResult, nothing is raised to the caller
- Gateways are the backends that actually mint a Checkout Session URL:
    StripeCheckoutGateway  -> stripe.checkout.Session.create(...)
    HttpCheckoutGateway    -> POST {tier} to CHECKOUT_API_URL
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urljoin

import requests
import stripe

from services.tiers import SubscriptionTier

log = logging.getLogger(__name__)

PROVIDER_UNAVAILABLE_MSG = "Payment system is not configured. Please contact the administrator."
NO_URL_MSG = "Failed to create checkout session"
GENERIC_FAILURE_MSG = "Failed to create subscription"

DEFAULT_TIMEOUT_SECONDS = 15.0

# ───────────────────────────── helpers: config/env ─────────────────────────────

def get_cfg(key: str) -> Optional[str]:
    """Read from env first (safe at import), then Flask config if an app ctx exists."""
    v = os.environ.get(key)
    if v and v.strip():
        return v.strip()
    from flask import current_app, has_app_context

    if has_app_context():
        w = current_app.config.get(key)
        if w is not None and str(w).strip():
            return str(w).strip()
    return None


def require_cfg(key: str) -> str:
    v = get_cfg(key)
    if not v:
        raise RuntimeError(f"{key} not configured")
    return v


def is_provider_available() -> bool:
    """True when a publishable Stripe key is configured."""
    return bool(get_cfg("STRIPE_PUBLIC_KEY"))

# ───────────────────────────── result type ─────────────────────────────

@dataclass(frozen=True)
class CheckoutResult:
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.url)

    @classmethod
    def failure(cls, message: str) -> "CheckoutResult":
        return cls(url=None, error=message)


class CheckoutRequestError(Exception):
    """Backend answered, but not with a usable checkout session."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class CheckoutGateway(Protocol):
    def create_checkout_session(self, tier: SubscriptionTier) -> Mapping[str, Any]: ...


def _error_message(err: BaseException) -> str:
    if isinstance(err, stripe.StripeError):
        msg = getattr(err, "user_message", None) or str(err)
    else:
        msg = str(err)
    msg = (msg or "").strip()
    return msg or GENERIC_FAILURE_MSG


async def request_checkout(gateway: CheckoutGateway, tier: SubscriptionTier) -> CheckoutResult:
    """
    Ask the gateway for a Checkout Session exactly once.

    Gateways are blocking (stripe/requests), so the call runs on a worker
    thread and the event loop keeps serving while it is pending.
    """
    try:
        payload = await asyncio.to_thread(gateway.create_checkout_session, tier)
    except Exception as e:
        log.exception("Error creating subscription (tier=%s)", tier.value)
        return CheckoutResult.failure(_error_message(e))

    url = None
    if isinstance(payload, Mapping):
        url = payload.get("url")
    if not url or not isinstance(url, str):
        log.warning("Checkout backend returned no url (tier=%s)", tier.value)
        return CheckoutResult.failure(NO_URL_MSG)
    return CheckoutResult(url=url)

# ───────────────────────────── Stripe gateway ─────────────────────────────

def base_url_from(root: Optional[str]) -> str:
    """Absolute site base with trailing slash; APP_BASE_URL wins over the request root."""
    explicit = get_cfg("APP_BASE_URL") or (root or "").strip()
    return explicit if explicit.endswith("/") else explicit + "/"


class StripeCheckoutGateway:
    """Creates subscription-mode Checkout Sessions directly against Stripe."""

    def __init__(
        self,
        *,
        secret_key: str,
        price_ids: Dict[SubscriptionTier, str],
        base_url: str,
        user: Any = None,
    ):
        self.secret_key = secret_key
        self.price_ids = price_ids
        self.base_url = base_url
        self.user = user

    def _params(self, price_id: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "mode": "subscription",
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": urljoin(self.base_url, "account?checkout=success"),
            "cancel_url": urljoin(self.base_url, "pricing"),
            "allow_promotion_codes": True,
        }
        u = self.user
        if u is not None and getattr(u, "id", None) is not None:
            params["client_reference_id"] = str(u.id)
            params["metadata"] = {
                "user_id": str(u.id),
                "email": getattr(u, "email", "") or "",
                "price_id": price_id,
            }
            existing_customer = getattr(u, "stripe_customer_id", None)
            if existing_customer:
                params["customer"] = existing_customer
        return params

    def create_checkout_session(self, tier: SubscriptionTier) -> Mapping[str, Any]:
        price_id = self.price_ids.get(tier)
        if not price_id:
            raise RuntimeError(f"{tier.price_key} not configured")
        if not self.secret_key:
            raise RuntimeError("STRIPE_SECRET_KEY not configured")

        stripe.api_key = self.secret_key
        session = stripe.checkout.Session.create(**self._params(price_id))
        log.info("[Stripe] checkout session id=%s tier=%s", getattr(session, "id", None), tier.value)
        return {"url": getattr(session, "url", None)}

# ───────────────────────────── HTTP gateway ─────────────────────────────

class HttpCheckoutGateway:
    """POSTs the tier to an external checkout backend and expects {"url": ...}."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        http: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.headers = headers or {}
        self.http = http or requests.Session()

    def create_checkout_session(self, tier: SubscriptionTier) -> Mapping[str, Any]:
        resp = self.http.post(
            self.endpoint,
            json={"tier": tier.value},
            headers=self.headers,
            timeout=self.timeout,
        )
        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok:
            msg = None
            if isinstance(body, dict):
                msg = body.get("error") or body.get("message")
            raise CheckoutRequestError(msg or f"Checkout backend returned HTTP {resp.status_code}", resp.status_code)

        return body if isinstance(body, dict) else {}

# ───────────────────────────── factory ─────────────────────────────

def _price_ids() -> Dict[SubscriptionTier, str]:
    out: Dict[SubscriptionTier, str] = {}
    for tier in SubscriptionTier:
        pid = get_cfg(tier.price_key)
        if pid:
            out[tier] = pid
    return out


def _timeout() -> float:
    raw = get_cfg("CHECKOUT_TIMEOUT_SECONDS")
    try:
        return float(raw) if raw else DEFAULT_TIMEOUT_SECONDS
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


def checkout_gateway_from_config(*, user: Any = None, url_root: Optional[str] = None) -> CheckoutGateway:
    """HTTP backend when CHECKOUT_API_URL is set, Stripe otherwise."""
    endpoint = get_cfg("CHECKOUT_API_URL")
    if endpoint:
        return HttpCheckoutGateway(endpoint, timeout=_timeout())
    return StripeCheckoutGateway(
        secret_key=get_cfg("STRIPE_SECRET_KEY") or "",
        price_ids=_price_ids(),
        base_url=base_url_from(url_root),
        user=user,
    )
