from dataclasses import dataclass
from typing import Dict, Optional

from constants.permissions import (
    MODULE_BALANCE,
    MODULE_BLOG,
    MODULE_COMMISSION,
    MODULE_COMPANIES,
    MODULE_DEALERS,
    MODULE_DEVICE_PURCHASE,
    MODULE_DEVICE_SALES,
    MODULE_MILEAGE,
    MODULE_PANEL_USERS,
    MODULE_PROGRAM_USERS,
    MODULE_REPORTS,
    MODULE_ROLES,
    MODULE_SETTINGS,
    MODULE_VIN,
)


@dataclass(frozen=True)
class MenuEntry:
    """
    A sidebar entry. Entries tagged with a module are shown according to the role's
    ``view`` permission; untagged entries use the static ``visible`` flag.
    """
    href: str
    label: str
    module: Optional[str] = None
    visible: bool = True


MENU_ENTRIES = [
    MenuEntry("/panel", "Panel"),
    MenuEntry("/firmalar", "Firmalar", MODULE_COMPANIES),
    MenuEntry("/bayiler", "Bayiler", MODULE_DEALERS),
    MenuEntry("/bakiye", "Bakiye Yönetimi", MODULE_BALANCE),
    MenuEntry("/komisyon", "Komisyon Yönetimi", MODULE_COMMISSION),
    MenuEntry("/panel-users", "Panel Kullanıcıları", MODULE_PANEL_USERS),
    MenuEntry("/kullanicilar", "Program Kullanıcıları", MODULE_PROGRAM_USERS),
    MenuEntry("/kilometre", "Kilometre Hacker", MODULE_MILEAGE),
    MenuEntry("/vinreader", "VIN Hacker", MODULE_VIN),
    MenuEntry("/cihaz-satislari", "Cihaz Satışları", MODULE_DEVICE_SALES),
    MenuEntry("/cihaz-satin-al", "Cihaz Satın Al", MODULE_DEVICE_PURCHASE),
    MenuEntry("/roller", "Roller", MODULE_ROLES),
    MenuEntry("/raporlar", "Raporlar", MODULE_REPORTS),
    MenuEntry("/blog-ekle", "Blog", MODULE_BLOG),
    MenuEntry("/ayarlar", "Ayarlar", MODULE_SETTINGS),
]

# Route path -> module whose "view" permission guards it. Paths mapped to None are
# common pages every logged user may open.
ROUTE_MODULES: Dict[str, Optional[str]] = {
    "/": None,
    "/panel": None,
    "/profil": None,
    "/odeme-basarili": None,
    "/odeme-yap-iyzico": None,
    "/firmalar": MODULE_COMPANIES,
    "/bayiler": MODULE_DEALERS,
    "/bakiye": MODULE_BALANCE,
    "/komisyon": MODULE_COMMISSION,
    "/panel-users": MODULE_PANEL_USERS,
    "/kullanicilar": MODULE_PROGRAM_USERS,
    "/kilometre": MODULE_MILEAGE,
    "/vinreader": MODULE_VIN,
    "/cihaz-satislari": MODULE_DEVICE_SALES,
    "/cihaz-satin-al": MODULE_DEVICE_PURCHASE,
    "/roller": MODULE_ROLES,
    "/raporlar": MODULE_REPORTS,
    "/blog-ekle": MODULE_BLOG,
    "/ayarlar": MODULE_SETTINGS,
    "/ayarlar/lokasyonlar": MODULE_SETTINGS,
}


def module_for_path(path: str, routes: Optional[Dict[str, Optional[str]]] = None) -> Optional[str]:
    """
    Module guarding ``path``. Sub-paths inherit the module of their longest registered
    prefix ("/firmalar/12" -> Firmalar); unknown paths are common.
    """
    routes = ROUTE_MODULES if routes is None else routes
    clean = path.split("?", 1)[0].split("#", 1)[0]
    if len(clean) > 1:
        clean = clean.rstrip("/")
    if clean in routes:
        return routes[clean]
    best = None
    for prefix in routes:
        if prefix != "/" and clean.startswith(prefix + "/"):
            if best is None or len(prefix) > len(best):
                best = prefix
    return routes[best] if best else None
