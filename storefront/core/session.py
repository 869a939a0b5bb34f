"""Session management for storefront visitors"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..services.api_client import StorefrontAPIClient
from ..services.cart_store import CartStore
from ..services.checkout import CheckoutFlow


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserSession:
    """
    One UI session.

    Owns exactly one cart for its lifetime; the checkout flow is created
    on first use because it needs the API client.
    """
    session_id: str
    created_at: datetime
    updated_at: datetime
    cart: CartStore = field(default_factory=CartStore)
    checkout: Optional[CheckoutFlow] = None

    def touch(self) -> None:
        self.updated_at = _now()

    def get_checkout(self, client: StorefrontAPIClient) -> CheckoutFlow:
        """Get the session's checkout flow, creating it if needed"""
        if self.checkout is None:
            self.checkout = CheckoutFlow(self.cart, client)
        return self.checkout


class SessionManager:
    """Manages visitor sessions"""

    def __init__(self):
        self.sessions: dict[str, UserSession] = {}

    def create_session(self) -> UserSession:
        """Create a new session with an empty cart"""
        now = _now()
        session = UserSession(
            session_id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )
        # Cart activity keeps the session alive
        session.cart.subscribe(lambda _cart: session.touch())
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[UserSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def get_or_create_session(self, session_id: Optional[str] = None) -> UserSession:
        """Get existing session or create new one"""
        session = self.get_session(session_id) if session_id else None
        return session or self.create_session()

    def delete_session(self, session_id: str) -> bool:
        """Delete a session"""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions idle for longer than max_age_hours"""
        now = _now()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            del self.sessions[sid]
        return len(old_sessions)


# Singleton instance
session_manager = SessionManager()
