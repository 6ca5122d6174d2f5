"""
Role permissions and menu visibility.

Pure lookups over two fixed tables: the capability table (4 roles x 8
capabilities) and the menu list with the roles allowed to see each entry.
A user may carry a custom menu allow-list; when non-empty it replaces the
role's menus outright instead of being merged into them. Administrators
always see every menu.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union


class UserRole(str, Enum):
    ADMINISTRATOR = "administrator"
    SUPERVISOR = "supervisor"
    OPERATOR = "operator"
    DRIVER = "driver"


class Capability(str, Enum):
    VIEW_DASHBOARD = "canViewDashboard"
    MANAGE_DELIVERY_NOTES = "canManageDeliveryNotes"
    MANAGE_PURCHASE_ORDERS = "canManagePurchaseOrders"
    VIEW_REPORTS = "canViewReports"
    MANAGE_USERS = "canManageUsers"
    VIEW_ANALYTICS = "canViewAnalytics"
    PRINT_DOCUMENTS = "canPrintDocuments"
    MANAGE_SETTINGS = "canManageSettings"


ROLE_PERMISSIONS: Dict[UserRole, Dict[Capability, bool]] = {
    UserRole.ADMINISTRATOR: {
        Capability.VIEW_DASHBOARD: True,
        Capability.MANAGE_DELIVERY_NOTES: True,
        Capability.MANAGE_PURCHASE_ORDERS: True,
        Capability.VIEW_REPORTS: True,
        Capability.MANAGE_USERS: True,
        Capability.VIEW_ANALYTICS: True,
        Capability.PRINT_DOCUMENTS: True,
        Capability.MANAGE_SETTINGS: True,
    },
    UserRole.SUPERVISOR: {
        Capability.VIEW_DASHBOARD: True,
        Capability.MANAGE_DELIVERY_NOTES: True,
        Capability.MANAGE_PURCHASE_ORDERS: True,
        Capability.VIEW_REPORTS: True,
        Capability.MANAGE_USERS: False,
        Capability.VIEW_ANALYTICS: True,
        Capability.PRINT_DOCUMENTS: True,
        Capability.MANAGE_SETTINGS: False,
    },
    UserRole.OPERATOR: {
        Capability.VIEW_DASHBOARD: True,
        Capability.MANAGE_DELIVERY_NOTES: True,
        Capability.MANAGE_PURCHASE_ORDERS: False,
        Capability.VIEW_REPORTS: True,
        Capability.MANAGE_USERS: False,
        Capability.VIEW_ANALYTICS: False,
        Capability.PRINT_DOCUMENTS: True,
        Capability.MANAGE_SETTINGS: False,
    },
    UserRole.DRIVER: {
        Capability.VIEW_DASHBOARD: True,
        Capability.MANAGE_DELIVERY_NOTES: False,
        Capability.MANAGE_PURCHASE_ORDERS: False,
        Capability.VIEW_REPORTS: False,
        Capability.MANAGE_USERS: False,
        Capability.VIEW_ANALYTICS: False,
        Capability.PRINT_DOCUMENTS: False,
        Capability.MANAGE_SETTINGS: False,
    },
}


@dataclass(frozen=True)
class MenuItem:
    id: str
    title: str
    icon: str
    path: str
    allowed_roles: Tuple[UserRole, ...]
    description: str


_ALL_ROLES = tuple(UserRole)

MENU_ITEMS: List[MenuItem] = [
    MenuItem(
        id="dashboard",
        title="Dashboard",
        icon="🏠",
        path="/",
        allowed_roles=_ALL_ROLES,
        description="Halaman utama sistem",
    ),
    MenuItem(
        id="pengiriman",
        title="Dashboard Pengiriman",
        icon="🚛",
        path="/pengiriman",
        allowed_roles=(UserRole.ADMINISTRATOR, UserRole.SUPERVISOR, UserRole.OPERATOR),
        description="Kelola data pengiriman dan surat jalan",
    ),
    MenuItem(
        id="surat-jalan",
        title="Surat Jalan",
        icon="📋",
        path="/surat-jalan",
        allowed_roles=(UserRole.ADMINISTRATOR, UserRole.SUPERVISOR, UserRole.OPERATOR),
        description="Buat dan kelola surat jalan",
    ),
    MenuItem(
        id="purchase-orders",
        title="Purchase Orders",
        icon="📦",
        path="/purchase-orders",
        allowed_roles=(UserRole.ADMINISTRATOR, UserRole.SUPERVISOR),
        description="Kelola data purchase order",
    ),
    MenuItem(
        id="laporan",
        title="Laporan",
        icon="📊",
        path="/laporan",
        allowed_roles=(UserRole.ADMINISTRATOR, UserRole.SUPERVISOR, UserRole.OPERATOR),
        description="Generate laporan operasional",
    ),
    MenuItem(
        id="analytics",
        title="Analytics",
        icon="📈",
        path="/analytics",
        allowed_roles=(UserRole.ADMINISTRATOR, UserRole.SUPERVISOR),
        description="Analisis data dan kinerja",
    ),
    MenuItem(
        id="pengaturan",
        title="Pengaturan",
        icon="⚙️",
        path="/pengaturan",
        allowed_roles=(UserRole.ADMINISTRATOR,),
        description="Konfigurasi sistem dan user",
    ),
]

MENU_IDS = frozenset(menu.id for menu in MENU_ITEMS)

ROLE_DISPLAY_NAMES: Dict[UserRole, str] = {
    UserRole.ADMINISTRATOR: "Administrator",
    UserRole.SUPERVISOR: "Supervisor",
    UserRole.OPERATOR: "Operator",
    UserRole.DRIVER: "Driver",
}

ROLE_DESCRIPTIONS: Dict[UserRole, str] = {
    UserRole.ADMINISTRATOR: "Akses penuh ke semua fitur sistem",
    UserRole.SUPERVISOR: "Akses ke manajemen operasional dan laporan",
    UserRole.OPERATOR: "Akses ke pengiriman dan surat jalan",
    UserRole.DRIVER: "Akses terbatas untuk melihat dashboard",
}


def has_permission(role: UserRole, capability: Capability) -> bool:
    return ROLE_PERMISSIONS[UserRole(role)][Capability(capability)]


def permissions_for(role: UserRole) -> Dict[str, bool]:
    """Capability table row for a role, keyed by capability name"""
    return {cap.value: allowed for cap, allowed in ROLE_PERMISSIONS[UserRole(role)].items()}


def get_accessible_menus(role: UserRole) -> List[MenuItem]:
    role = UserRole(role)
    return [menu for menu in MENU_ITEMS if role in menu.allowed_roles]


def can_access_route(role: UserRole, path: str) -> bool:
    role = UserRole(role)
    for menu in MENU_ITEMS:
        if menu.path == path:
            return role in menu.allowed_roles
    return False


# Menu access is a tagged choice so "replace, don't merge" is explicit.

@dataclass(frozen=True)
class RoleDefault:
    pass


@dataclass(frozen=True)
class CustomOverride:
    menu_ids: FrozenSet[str]


MenuAccess = Union[RoleDefault, CustomOverride]


def menu_access_for(custom_menu_ids: Optional[Iterable[str]]) -> MenuAccess:
    """Build the menu access choice from a stored per-user allow-list."""
    menu_ids = frozenset(custom_menu_ids or ())
    if not menu_ids:
        return RoleDefault()
    return CustomOverride(menu_ids=menu_ids)


def resolve_user_menus(role: UserRole, access: MenuAccess) -> List[MenuItem]:
    """Menus visible to one user.

    Administrators see every menu regardless of ``access``. A custom override
    replaces the role's menu list entirely; unknown ids in it are ignored.
    """
    role = UserRole(role)
    if role is UserRole.ADMINISTRATOR:
        return list(MENU_ITEMS)
    if isinstance(access, CustomOverride):
        return [menu for menu in MENU_ITEMS if menu.id in access.menu_ids]
    return get_accessible_menus(role)
