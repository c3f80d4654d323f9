from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from client.permission_cache import CacheState, PermissionCache
from constants.navigation import MENU_ENTRIES, MenuEntry
from constants.permissions import ACTION_VIEW
from constants.roles import bypasses_permissions
from tools.logger import get_logger

logger = get_logger("menu")

PERMISSIONS_UNAVAILABLE = "Yetkiler şu anda yüklenemiyor. Bazı menüler gizlendi."


@dataclass
class MenuView:
    pending: bool
    entries: List[MenuEntry] = field(default_factory=list)
    notice: Optional[str] = None


class MenuFilter:
    """Sidebar filtering driven by a PermissionCache."""

    def __init__(self, cache: PermissionCache, entries: Optional[Sequence[MenuEntry]] = None):
        self.cache = cache
        self.entries = list(MENU_ENTRIES if entries is None else entries)

    def current(self) -> MenuView:
        role = self.cache.role
        if role is not None and bypasses_permissions(role, self.cache.admin_equals_super_admin):
            return MenuView(pending=False, entries=list(self.entries))

        state = self.cache.state
        if state in (CacheState.UNINITIALIZED, CacheState.LOADING):
            return MenuView(pending=True)

        visible = []
        for entry in self.entries:
            if entry.module is None:
                if entry.visible:
                    visible.append(entry)
            elif self.cache.can(entry.module, ACTION_VIEW):
                visible.append(entry)

        if state == CacheState.FAILED:
            return MenuView(pending=False, entries=visible, notice=PERMISSIONS_UNAVAILABLE)
        return MenuView(pending=False, entries=visible)

    async def load(self, role: Optional[str] = None) -> MenuView:
        await self.cache.load(role)
        view = self.current()
        logger.debug(f"Menu for role {self.cache.role!r}: {[e.href for e in view.entries]}")
        return view
