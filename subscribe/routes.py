# subscribe/routes.py
"""
GET /subscribe?tier=basic|pro|power

Runs the SubscribePage controller for one request and turns its outcome into
a response:
  - anonymous         -> 302 to "/" (nothing rendered)
  - checkout url      -> 303 to Stripe, body = "Redirecting to Checkout" fallback
  - error             -> 200 HTML

The checkout call is awaited before responding, so a browser never receives
the Loading view; it only exists while the controller is mid-flight.
"""

from __future__ import annotations

from typing import Optional

from flask import current_app, redirect, render_template, request
from flask_login import current_user

from services.checkout import checkout_gateway_from_config
from services.page_controller import ResponseNavigator, SubscribePage, View
from services.page_meta import DocumentMetadataPort, HeadDocument
from services.session import FlaskLoginSessionProvider
from services.tiers import parse_tier
from . import bp

DEFAULT_DESCRIPTION = "Generate professional LaTeX documents with AI."


def _render(view: View, head: HeadDocument, redirect_url: Optional[str] = None) -> str:
    return render_template("subscribe.html", view=view, head=head, redirect_url=redirect_url)


@bp.route("/subscribe", methods=["GET"])
async def subscribe():
    tier = parse_tier(request.args.get("tier"))
    user = current_user._get_current_object()

    # Base layout always ships a description tag; the page updates it in place.
    head = HeadDocument(meta={"description": DEFAULT_DESCRIPTION})
    navigator = ResponseNavigator()
    page = SubscribePage(
        session_provider=FlaskLoginSessionProvider(user),
        navigator=navigator,
        gateway=checkout_gateway_from_config(user=user, url_root=request.url_root),
        metadata=DocumentMetadataPort(head),
        tier=tier,
    )

    try:
        await page.mount()
        view = page.render()
    finally:
        page.unmount()

    if view is None:
        _, path = navigator.last or ("internal", "/")
        return redirect(path)

    if navigator.last and navigator.last[0] == "external":
        url = navigator.last[1]
        current_app.logger.info("Redirecting user %s to checkout (tier=%s)", getattr(user, "id", None), tier.value)
        resp = redirect(url, code=303)
        resp.set_data(_render(view, head, redirect_url=url))
        return resp

    return _render(view, head)
