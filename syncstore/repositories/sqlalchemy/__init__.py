from .sqlalchemy_role_repository import SqlalchemyRoleRepository
from .sqlalchemy_permission_repository import SqlalchemyPermissionRepository
