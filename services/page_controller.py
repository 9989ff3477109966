# services/page_controller.py
"""
Subscribe page controller (framework-free).

Flow, per run:
  1) access guard   -> anonymous session: navigate("/") once, render nothing
  2) provider check -> no publishable key: ERROR, backend never contacted
  3) checkout call  -> url: leave the app via redirect_external(url)
                       failure: ERROR(message)

Metadata is injected once on mount, independent of the flow. Session changes
re-run the guard (and the checkout while the page is still LOADING). Results
that arrive after unmount, or after a newer run superseded theirs, are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

from services.checkout import (
    PROVIDER_UNAVAILABLE_MSG,
    CheckoutGateway,
    is_provider_available,
    request_checkout,
)
from services.page_meta import PageMetadataPort, inject_subscription_metadata
from services.session import Session, SessionProvider
from services.tiers import SubscriptionTier

log = logging.getLogger(__name__)

HOME_PATH = "/"
ACCOUNT_PATH = "/account"

SEO_TITLE = "Subscribe to AI LaTeX Generator - Premium Plans"
SEO_TITLE_ERROR = "Subscription Error - AI LaTeX Generator"


class ViewState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    REDIRECTING = "redirecting"


@dataclass
class PageState:
    state: ViewState = ViewState.LOADING
    message: Optional[str] = None
    redirect_url: Optional[str] = None


@dataclass(frozen=True)
class Action:
    label: str
    path: str


@dataclass(frozen=True)
class View:
    state: ViewState
    seo_title: str
    heading: str
    description: str = ""
    message: str = ""
    action: Optional[Action] = None
    busy: bool = False


class Navigator(Protocol):
    def navigate(self, path: str) -> None: ...

    def redirect_external(self, url: str) -> None: ...


class ResponseNavigator:
    """Records navigations so a web layer can turn them into a redirect response."""

    def __init__(self):
        self.history: List[Tuple[str, str]] = []

    def navigate(self, path: str) -> None:
        self.history.append(("internal", path))

    def redirect_external(self, url: str) -> None:
        self.history.append(("external", url))

    @property
    def last(self) -> Optional[Tuple[str, str]]:
        return self.history[-1] if self.history else None


class SubscribePage:
    def __init__(
        self,
        *,
        session_provider: SessionProvider,
        navigator: Navigator,
        gateway: CheckoutGateway,
        metadata: PageMetadataPort,
        tier: SubscriptionTier,
        provider_available: Callable[[], bool] = is_provider_available,
    ):
        self.session_provider = session_provider
        self.navigator = navigator
        self.gateway = gateway
        self.metadata = metadata
        self.tier = tier
        self.provider_available = provider_available

        self.page = PageState()
        self._alive = False
        self._sent_home = False
        self._mount_token = 0
        self._generation = 0
        self._pending_gen: Optional[int] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: List[asyncio.Task] = []

    @property
    def state(self) -> ViewState:
        return self.page.state

    @property
    def alive(self) -> bool:
        return self._alive

    # ----- lifecycle -----

    async def mount(self) -> None:
        # Re-entry starts over: fresh state, one listener, no runs owned by an earlier mount.
        self._release()
        self._mount_token += 1
        self._generation += 1
        self._pending_gen = None
        self.page = PageState()
        self._sent_home = False
        self._alive = True
        inject_subscription_metadata(self.metadata)
        self._unsubscribe = self.session_provider.subscribe(self._on_session_change)
        await self.run()

    def unmount(self) -> None:
        self._alive = False
        self._generation += 1
        self._pending_gen = None
        self._release()

    def _release(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def settle(self) -> None:
        """Wait for runs scheduled by session changes."""
        while self._tasks:
            tasks, self._tasks = self._tasks, []
            await asyncio.gather(*tasks)

    def _on_session_change(self, session: Session) -> None:
        if not self._alive:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to schedule on; the guard still runs synchronously.
            self._guard()
            return
        self._tasks.append(loop.create_task(self.run()))

    # ----- flow -----

    def _guard(self) -> bool:
        if self.session_provider.current().is_authenticated:
            self._sent_home = False
            return True
        # Supersede any checkout still in flight for the old session.
        self._generation += 1
        if not self._sent_home:
            self._sent_home = True
            self.navigator.navigate(HOME_PATH)
        return False

    async def run(self) -> None:
        if not self._guard():
            return
        if self.page.state is not ViewState.LOADING:
            return
        if self._pending_gen is not None and self._pending_gen == self._generation:
            return

        # Re-read every run so configuration can change between runs.
        if not self.provider_available():
            self._fail(PROVIDER_UNAVAILABLE_MSG)
            return

        token = self._mount_token
        self._generation += 1
        gen = self._generation
        self._pending_gen = gen
        try:
            result = await request_checkout(self.gateway, self.tier)
        finally:
            if self._pending_gen == gen:
                self._pending_gen = None

        if not self._alive or token != self._mount_token or gen != self._generation:
            log.info("Dropping stale checkout result (tier=%s)", self.tier.value)
            return

        if result.ok:
            self.navigator.redirect_external(result.url)
            self._transition(ViewState.REDIRECTING, redirect_url=result.url)
        else:
            self._fail(result.error or "")

    def _fail(self, message: str) -> None:
        self._transition(ViewState.ERROR, message=message)

    def _transition(self, to: ViewState, *, message: Optional[str] = None, redirect_url: Optional[str] = None) -> None:
        if self.page.state is not ViewState.LOADING:
            log.warning("Ignoring %s -> %s", self.page.state.value, to.value)
            return
        self.page = PageState(state=to, message=message, redirect_url=redirect_url)

    # ----- rendering -----

    def render(self) -> Optional[View]:
        if not self.session_provider.current().is_authenticated:
            return None

        st = self.page.state
        if st is ViewState.LOADING:
            return View(
                state=st,
                seo_title=SEO_TITLE,
                heading="Preparing checkout...",
                busy=True,
            )
        if st is ViewState.ERROR:
            return View(
                state=st,
                seo_title=SEO_TITLE_ERROR,
                heading="Subscription Error",
                description="There was a problem setting up your subscription",
                message=self.page.message or "",
                action=Action("Return to Home", HOME_PATH),
            )
        return View(
            state=st,
            seo_title=SEO_TITLE,
            heading="Redirecting to Checkout",
            description="Please wait while we redirect you to the secure payment page",
            message="If you are not redirected automatically, please click the button below.",
            action=Action("Return to Account", ACCOUNT_PATH),
        )
