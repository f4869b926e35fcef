"""Session/role workflow.

``SessionState`` is the single owner of the signed-in identity. It mirrors
the Supabase auth session, loads (or lazily creates) the user's profile,
applies a role staged before a redirect sign-in, and keeps the saved
property cache in step with whoever is signed in. Components receive the
state explicitly instead of reading a global.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Optional

from panoproperty.models.profile import Profile, Role, DEFAULT_ROLE
from panoproperty.models.property import Property
from panoproperty.models.session import UserSession
from panoproperty.services.local_store import PendingRoleStore
from panoproperty.services.saved_properties import SavedProperties
from panoproperty.services.supabase_client import (
    SupabaseClient,
    get_profile,
    create_profile,
    update_profile_role,
    list_saved_property_ids,
)
from panoproperty.utils.errors import SupabaseError
from panoproperty.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


class Capability(str, Enum):
    """UI actions gated by sign-in state and role."""
    BROWSE = "browse"
    SAVE = "save"
    BECOME_SELLER = "become_seller"
    LIST_PROPERTY = "list_property"
    MANAGE_LISTINGS = "manage_listings"


ANONYMOUS_CAPABILITIES = frozenset({Capability.BROWSE})
BUYER_CAPABILITIES = frozenset({Capability.BROWSE, Capability.SAVE, Capability.BECOME_SELLER})
SELLER_CAPABILITIES = frozenset({
    Capability.BROWSE,
    Capability.SAVE,
    Capability.LIST_PROPERTY,
    Capability.MANAGE_LISTINGS,
})


class SessionState:
    """Current user, profile role and saved IDs, kept in sync with auth events."""

    def __init__(
        self,
        saved: Optional[SavedProperties] = None,
        pending_roles: Optional[PendingRoleStore] = None,
        on_auth_required: Optional[Callable[[], None]] = None,
    ):
        self.session: Optional[UserSession] = None
        self.profile: Optional[Profile] = None
        self.saved = saved if saved is not None else SavedProperties(on_auth_required)
        self.pending_roles = pending_roles if pending_roles is not None else PendingRoleStore()
        self.on_auth_required = on_auth_required
        self.error: Optional[str] = None
        self._subscription: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: set[asyncio.Task] = set()
        self._generation = 0
        self._stopped = False
        self._listeners: list[Callable[["SessionState"], None]] = []

    # Lifecycle

    async def start(self) -> None:
        """Read the current session once, then follow auth state changes."""
        if self._subscription is not None:
            return
        self._stopped = False
        self._loop = asyncio.get_running_loop()

        async with SupabaseClient() as client:
            try:
                current = client.auth.get_session()
            except Exception as e:
                logger.warning("Failed to read current session", error=str(e))
                current = None
            self._subscription = client.auth.on_auth_state_change(self._handle_auth_event)

        logger.info("Session listener started", signed_in=current is not None)
        await self.apply_session(UserSession.from_auth_session(current))

    def stop(self) -> None:
        """Unsubscribe; results of requests still in flight are discarded."""
        self._stopped = True
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.info("Session listener stopped")

    async def settle(self) -> None:
        """Wait until every scheduled auth event has been applied."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def add_listener(self, listener: Callable[["SessionState"], None]) -> Callable[[], None]:
        """Call ``listener`` after every state change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _handle_auth_event(self, event: Any, session: Any) -> None:
        user_session = UserSession.from_auth_session(session)
        logger.debug("Auth state changed", auth_event=str(event), signed_in=user_session is not None)
        if self._loop is None or self._stopped:
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._schedule(user_session)
        else:
            # Token refreshes fire from the auth client's timer thread.
            self._loop.call_soon_threadsafe(self._schedule, user_session)

    def _schedule(self, user_session: Optional[UserSession]) -> None:
        task = self._loop.create_task(self.apply_session(user_session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, generation: int) -> bool:
        return not self._stopped and generation == self._generation

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # State updates

    async def apply_session(self, session: Optional[UserSession]) -> None:
        """The one update path for identity, profile and saved IDs.

        Only the most recent call's results are kept.
        """
        self._generation += 1
        generation = self._generation

        if session is None:
            self.session = None
            self.profile = None
            self.error = None
            self.saved.clear()
            self._notify()
            return

        self.session = session
        try:
            profile = await self._load_profile(session)
            if not self._is_current(generation):
                logger.debug("Discarding stale session load", user_id=mask_user_id(session.user_id))
                return
            # Only the current load may consume the pending role.
            profile = await self._apply_pending_role(profile)
            saved_ids = await list_saved_property_ids(session.user_id)
        except SupabaseError as e:
            if self._is_current(generation):
                self.error = str(e)
                logger.error("Failed to load session data", user_id=mask_user_id(session.user_id), error=str(e))
                self._notify()
            return

        if not self._is_current(generation):
            logger.debug("Discarding stale session load", user_id=mask_user_id(session.user_id))
            return

        self.profile = profile
        self.error = None
        self.saved.replace(session.user_id, saved_ids)
        logger.info(
            "Session loaded",
            user_id=mask_user_id(session.user_id),
            role=profile.role,
            saved_count=len(saved_ids),
        )
        self._notify()

    async def _load_profile(self, session: UserSession) -> Profile:
        row = await get_profile(session.user_id)
        if row is not None:
            return Profile.from_row(row)

        profile = Profile(
            id=session.user_id,
            email=session.email,
            full_name=session.full_name,
            role=DEFAULT_ROLE,
        )
        created = await create_profile(profile.to_row())
        logger.info("Profile created", user_id=mask_user_id(session.user_id))
        return Profile.from_row(created)

    async def _apply_pending_role(self, profile: Profile) -> Profile:
        pending = self.pending_roles.peek()
        if pending is None:
            return profile

        if pending != profile.role:
            await update_profile_role(profile.id, pending)
            profile = profile.model_copy(update={"role": pending})
            logger.info("Pending role applied", user_id=mask_user_id(profile.id), role=pending)
        self.pending_roles.clear()
        return profile

    # Derived state

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile else None

    @property
    def is_seller(self) -> bool:
        return self.role == Role.SELLER.value

    @property
    def capabilities(self) -> frozenset:
        if self.session is None or self.profile is None:
            return ANONYMOUS_CAPABILITIES
        if self.is_seller:
            return SELLER_CAPABILITIES
        return BUYER_CAPABILITIES

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def can_manage(self, prop: Property) -> bool:
        """Sellers may edit or delete only listings they own."""
        return (
            self.session is not None
            and self.is_seller
            and prop.seller_id is not None
            and prop.seller_id == self.session.user_id
        )

    # Actions

    async def become_seller(self, confirm: Callable[[], bool]) -> bool:
        """Switch a buyer to the seller role after explicit confirmation.

        There is no matching downgrade action.
        """
        if self.session is None or self.profile is None:
            if self.on_auth_required:
                self.on_auth_required()
            return False
        if self.is_seller:
            return True
        if not confirm():
            return False

        try:
            await update_profile_role(self.session.user_id, Role.SELLER.value)
        except SupabaseError as e:
            self.error = str(e)
            logger.error("Failed to switch to seller", user_id=mask_user_id(self.session.user_id), error=str(e))
            return False

        self.profile = self.profile.model_copy(update={"role": Role.SELLER.value})
        self.error = None
        logger.info("Role changed to seller", user_id=mask_user_id(self.session.user_id))
        self._notify()
        return True

    async def toggle_save(self, property_id: str) -> Optional[bool]:
        return await self.saved.toggle(self.session, property_id)
