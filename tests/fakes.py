"""Test doubles for the mail transport, the email dispatcher and the page cache."""

from typing import List, Optional, Set

from gallery_notifications.core.config import settings
from gallery_notifications.core.context import RequestContext
from gallery_notifications.modules.comments.invalidation import CacheInvalidator
from gallery_notifications.modules.notifications.email import DispatchResult
from gallery_notifications.modules.notifications.tokens import OptOutTokenMinter

ENCRYPT_KEY = "0123456789abcdef" * 4


class FakeMailClient:
    """Stands in for FastMail; records messages or raises on demand."""

    def __init__(self, error: Optional[Exception] = None):
        self.messages = []
        self.error = error

    async def send_message(self, message, template_name=None):
        if self.error is not None:
            raise self.error
        self.messages.append(message)


class RecordingDispatcher:
    """Records every send; addresses in `failing` come back as failures."""

    def __init__(self, failing: Optional[Set[str]] = None, raising: Optional[Set[str]] = None):
        self.sent: List[tuple] = []
        self.failing = failing or set()
        self.raising = raising or set()

    async def send(self, recipient_email, props):
        if recipient_email in self.raising:
            raise RuntimeError(f"transport exploded for {recipient_email}")
        if recipient_email in self.failing:
            return DispatchResult(ok=False, error="smtp 550")
        self.sent.append((recipient_email, props))
        return DispatchResult(ok=True)

    @property
    def recipients(self) -> List[str]:
        return [email for email, _ in self.sent]

    def props_for(self, email):
        for sent_to, props in self.sent:
            if sent_to == email:
                return props
        return None


class SpyInvalidator(CacheInvalidator):
    """CacheInvalidator that remembers the scopes it was asked to drop."""

    def __init__(self):
        super().__init__()
        self.scopes: List[str] = []

    async def invalidate(self, scopes):
        self.scopes.extend(scopes)


def make_minter(key_hex: Optional[str] = ENCRYPT_KEY) -> OptOutTokenMinter:
    return OptOutTokenMinter(settings.site_url, key_hex)


def make_ctx(
    db,
    actor,
    *,
    dispatcher=None,
    minter=None,
    invalidator=None,
) -> RequestContext:
    return RequestContext(
        db=db,
        actor=actor,
        settings=settings,
        dispatcher=dispatcher or RecordingDispatcher(),
        minter=minter or make_minter(),
        invalidator=invalidator or SpyInvalidator(),
    )
