import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Tuple

from config import PERMISSION_FETCH_TIMEOUT
from constants.permissions import ensure_known, full_permission_set
from constants.roles import bypasses_permissions
from services.exceptions import TransportError
from tools.logger import get_logger

logger = get_logger("permission_cache")

PermissionFetcher = Callable[[str], Awaitable[Dict[str, Dict[str, bool]]]]


class CacheState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class PermissionCache:
    """
    Client side cache of the logged user's resolved permissions.

    The cache follows one role at a time. Changing the role or calling ``invalidate``
    moves it to LOADING and bumps a generation counter; a fetch only lands if its
    (role, generation) is still current when it completes, so late answers for a
    previous role are dropped. Concurrent loads for the same (role, generation) share
    one outstanding fetch.

    Failures and timeouts leave the cache FAILED with no permissions; the error is
    kept in ``error`` for diagnostics.
    """

    def __init__(self, fetcher: PermissionFetcher, timeout: Optional[float] = None,
                 admin_equals_super_admin: Optional[bool] = None):
        self._fetcher = fetcher
        self.timeout = PERMISSION_FETCH_TIMEOUT if timeout is None else timeout
        self.admin_equals_super_admin = admin_equals_super_admin
        self.role: Optional[str] = None
        self.state = CacheState.UNINITIALIZED
        self.permissions: Dict[str, Dict[str, bool]] = {}
        self.error: Optional[BaseException] = None
        self._generation = 0
        self._inflight: Dict[Tuple[str, int], asyncio.Future] = {}

    def set_role(self, role: Optional[str]) -> None:
        """Follow a new role (None on logout). Same role is a no-op."""
        if role == self.role:
            return
        logger.info(f"Role changed {self.role!r} -> {role!r}")
        self.role = role
        self._reset(CacheState.LOADING if role else CacheState.UNINITIALIZED)

    def invalidate(self) -> None:
        """
        Forget the current permissions. If a fetch for the role was in flight, a fresh
        one is started right away; otherwise the next ``load`` fetches again.
        """
        if self.role is None:
            return
        refetch = any(key[0] == self.role for key in self._inflight)
        self._reset(CacheState.LOADING)
        if refetch:
            self._start_fetch(self.role)

    def _reset(self, state: CacheState) -> None:
        self._generation += 1
        self.state = state
        self.permissions = {}
        self.error = None

    def _is_current(self, role: str, generation: int) -> bool:
        return role == self.role and generation == self._generation

    async def load(self, role: Optional[str] = None) -> Dict[str, Dict[str, bool]]:
        """
        Returns the permissions of ``role`` (or the followed role), fetching them if
        needed. A FAILED cache returns no permissions until invalidated.
        """
        if role is not None:
            self.set_role(role)
        role = self.role
        if role is None:
            return {}

        if bypasses_permissions(role, self.admin_equals_super_admin):
            self.state = CacheState.READY
            self.permissions = full_permission_set()
            return self.permissions
        if self.state == CacheState.READY:
            return self.permissions
        if self.state == CacheState.FAILED:
            return {}

        return await asyncio.shield(self._start_fetch(role))

    def _start_fetch(self, role: str) -> asyncio.Future:
        key = (role, self._generation)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(role, self._generation))
            self._inflight[key] = task
            task.add_done_callback(lambda _t: self._inflight.pop(key, None))
        return task

    async def _fetch(self, role: str, generation: int) -> Dict[str, Dict[str, bool]]:
        try:
            permissions = await asyncio.wait_for(self._fetcher(role), self.timeout)
        except asyncio.TimeoutError:
            error = TransportError(f"Permission fetch for {role!r} timed out after {self.timeout}s")
            return self._fail(role, generation, error)
        except TransportError as e:
            return self._fail(role, generation, e)
        except Exception as e:
            self._fail(role, generation, e)
            raise

        if not self._is_current(role, generation):
            logger.info(f"Discarding stale permissions for role {role!r}")
            return {}
        self.state = CacheState.READY
        self.permissions = permissions or {}
        return self.permissions

    def _fail(self, role: str, generation: int, error: BaseException) -> Dict[str, Dict[str, bool]]:
        if self._is_current(role, generation):
            logger.error(f"Could not load permissions for role {role!r}: {error}")
            self.state = CacheState.FAILED
            self.permissions = {}
            self.error = error
        else:
            logger.info(f"Ignoring failure of stale permission fetch for role {role!r}: {error}")
        return {}

    def can(self, module: str, action: str) -> bool:
        """Synchronous check against the cached set. Anything but READY is a denial."""
        ensure_known(module, action)
        if self.role is not None and bypasses_permissions(self.role, self.admin_equals_super_admin):
            return True
        if self.state != CacheState.READY:
            return False
        record = self.permissions.get(module)
        if not isinstance(record, dict):
            return False
        return record.get(action) is True
