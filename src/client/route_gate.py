import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from config import PERMISSION_FETCH_TIMEOUT
from constants.navigation import ROUTE_MODULES, module_for_path
from constants.permissions import ACTION_VIEW
from constants.roles import is_privileged
from services.exceptions import InvalidArgument, TransportError
from tools.logger import get_logger

logger = get_logger("route_gate")

PermissionChecker = Callable[[str, str, str], Awaitable[bool]]

ACCESS_DENIED = "Bu sayfayı görüntülemek için yeterli yetkiniz bulunmamaktadır."
CHECK_FAILED = "Yetki kontrolü yapılamadı. Lütfen tekrar deneyin."


class GateState(str, Enum):
    CHECKING = "checking"
    AUTHORIZED = "authorized"
    DENIED = "denied"


class DenialReason(str, Enum):
    FORBIDDEN = "forbidden"
    ERROR = "error"


@dataclass
class GateDecision:
    path: str
    state: GateState
    module: Optional[str] = None
    reason: Optional[DenialReason] = None
    notice: Optional[str] = None


class RouteGate:
    """
    Per-navigation authorization of a route against the ``view`` permission of the
    module guarding it.

    Common routes and privileged roles are authorized without a check. Every other
    navigation asks the checker once; an error or a timeout denies the route with
    reason ``error`` and a later navigation asks again. Only the most recent navigation
    can change ``decision``.
    """

    def __init__(self, checker: PermissionChecker, routes: Optional[Dict[str, Optional[str]]] = None,
                 timeout: Optional[float] = None):
        self._checker = checker
        self.routes = ROUTE_MODULES if routes is None else routes
        self.timeout = PERMISSION_FETCH_TIMEOUT if timeout is None else timeout
        self.decision: Optional[GateDecision] = None
        self._navigation = 0

    @property
    def state(self) -> Optional[GateState]:
        return self.decision.state if self.decision else None

    async def navigate(self, role: Optional[str], path: str) -> GateDecision:
        self._navigation += 1
        token = self._navigation
        module = module_for_path(path, self.routes)

        if module is None:
            return self._settle(token, GateDecision(path, GateState.AUTHORIZED))
        if role and is_privileged(role):
            return self._settle(token, GateDecision(path, GateState.AUTHORIZED, module))
        if not role:
            return self._settle(
                token, GateDecision(path, GateState.DENIED, module, DenialReason.FORBIDDEN, ACCESS_DENIED)
            )

        self.decision = GateDecision(path, GateState.CHECKING, module)
        try:
            allowed = await asyncio.wait_for(self._checker(role, module, ACTION_VIEW), self.timeout)
        except InvalidArgument:
            logger.error(f"Route {path} is guarded by unknown module {module!r}")
            self._settle(token, GateDecision(path, GateState.DENIED, module, DenialReason.ERROR, CHECK_FAILED))
            raise
        except (TransportError, asyncio.TimeoutError) as e:
            logger.warning(f"Permission check for {path} ({role!r}) failed: {e!r}")
            decision = GateDecision(path, GateState.DENIED, module, DenialReason.ERROR, CHECK_FAILED)
        except Exception:
            logger.exception(f"Unexpected failure checking {path} for role {role!r}")
            decision = GateDecision(path, GateState.DENIED, module, DenialReason.ERROR, CHECK_FAILED)
        else:
            if allowed:
                decision = GateDecision(path, GateState.AUTHORIZED, module)
            else:
                logger.info(f"Role {role!r} denied on {path}")
                decision = GateDecision(path, GateState.DENIED, module, DenialReason.FORBIDDEN, ACCESS_DENIED)
        return self._settle(token, decision)

    def _settle(self, token: int, decision: GateDecision) -> GateDecision:
        if token == self._navigation:
            self.decision = decision
        else:
            logger.debug(f"Ignoring decision for superseded navigation to {decision.path}")
        return decision
