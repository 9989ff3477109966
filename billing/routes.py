# billing/routes.py
from __future__ import annotations

from urllib.parse import urljoin

import stripe
from flask import (
    Blueprint,
    current_app,
    jsonify,
    redirect,
    request,
    url_for,
)
from flask_login import login_required, current_user

from services.checkout import (
    PROVIDER_UNAVAILABLE_MSG,
    base_url_from,
    checkout_gateway_from_config,
    is_provider_available,
    request_checkout,
    require_cfg,
)
from services.tiers import parse_tier

billing_bp = Blueprint("billing", __name__, url_prefix="/billing")

# ───────────────────────────── Checkout (JSON) ─────────────────────────────

@billing_bp.route("/checkout", methods=["POST"])
@login_required
async def start_checkout():
    """
    Create a subscription Checkout Session for ?tier= / JSON {"tier": ...}.
    Returns JSON: {url: session.url} or {error: msg}
    """
    if not is_provider_available():
        return jsonify({"error": PROVIDER_UNAVAILABLE_MSG}), 503

    body = request.get_json(silent=True) or {}
    tier = parse_tier(body.get("tier") or request.form.get("tier") or request.args.get("tier"))

    gateway = checkout_gateway_from_config(user=current_user._get_current_object(), url_root=request.url_root)
    result = await request_checkout(gateway, tier)
    if not result.ok:
        return jsonify({"error": result.error}), 400
    return jsonify({"url": result.url, "tier": tier.value})

# ───────────────────────────── Billing Portal ─────────────────────────────

@billing_bp.route("/portal", methods=["GET"])
@login_required
def billing_portal():
    customer_id = getattr(current_user, "stripe_customer_id", None)
    if not customer_id:
        return redirect(url_for("pricing"))
    try:
        stripe.api_key = require_cfg("STRIPE_SECRET_KEY")
        session = stripe.billing_portal.Session.create(
            customer=customer_id,
            return_url=urljoin(base_url_from(request.url_root), "account"),
        )
        return redirect(session.url)
    except (stripe.StripeError, RuntimeError) as e:
        msg = getattr(e, "user_message", None) or str(e)
        current_app.logger.warning("[Stripe] portal error: %s", msg)
        return redirect(url_for("account", portal_error=msg))
