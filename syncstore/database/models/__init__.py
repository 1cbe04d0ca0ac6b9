from .role import PermissionUser, Role, role_members
from .permission import PERMISSION_FLAGS, Permission
from .containers import REALM_PERMISSIONS_ID, ClassPermissions, RealmPermissions
