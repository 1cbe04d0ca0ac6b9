from .role import IRoleRepository
from .permission import IPermissionRepository
