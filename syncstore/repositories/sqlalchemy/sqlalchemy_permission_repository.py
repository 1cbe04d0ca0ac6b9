import logging
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from syncstore.database import models
from syncstore.database.database import require_write_transaction
from syncstore.repositories.interfaces import IPermissionRepository
from syncstore.services.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

class SqlalchemyPermissionRepository(IPermissionRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def get_realm_permissions(self) -> Optional[models.RealmPermissions]:
        return self.db.get(models.RealmPermissions, models.REALM_PERMISSIONS_ID)

    def find_class_permissions(self, class_name: str) -> Optional[models.ClassPermissions]:
        return self.db.get(models.ClassPermissions, class_name)

    def list_object_permissions(self, type_name: str, object_id: str) -> List[models.Permission]:
        return (
            self.db.query(models.Permission)
            .filter(models.Permission.object_type == type_name, models.Permission.object_id == object_id)
            .order_by(models.Permission.position.asc(), models.Permission.id.asc())
            .all()
        )

    def ensure_realm_permissions(self) -> models.RealmPermissions:
        container = self.get_realm_permissions()
        if container is None:
            require_write_transaction(self.db, "Creating store permissions")
            container = models.RealmPermissions(id=models.REALM_PERMISSIONS_ID)
            self.db.add(container)
        return container

    def ensure_class_permissions(self, class_name: str) -> models.ClassPermissions:
        container = self.find_class_permissions(class_name)
        if container is None:
            require_write_transaction(self.db, f"Creating permissions for class '{class_name}'")
            container = models.ClassPermissions(name=class_name)
            self.db.add(container)
        return container

    def add_realm_permission(self, role: models.Role, **flags: bool) -> models.Permission:
        require_write_transaction(self.db, "Granting store permissions")
        permission = self._new_permission(role, flags)
        container = self.ensure_realm_permissions()
        container.permissions.append(permission)
        logger.debug(f"Granted {permission!r} at store scope")
        return permission

    def add_class_permission(self, class_name: str, role: models.Role, **flags: bool) -> models.Permission:
        require_write_transaction(self.db, f"Granting permissions on class '{class_name}'")
        permission = self._new_permission(role, flags)
        container = self.ensure_class_permissions(class_name)
        container.permissions.append(permission)
        logger.debug(f"Granted {permission!r} on class '{class_name}'")
        return permission

    def add_object_permission(self, type_name: str, object_id: str, role: models.Role, **flags: bool) -> models.Permission:
        require_write_transaction(self.db, f"Granting permissions on {type_name}({object_id})")
        last_position = (
            self.db.query(func.max(models.Permission.position))
            .filter(models.Permission.object_type == type_name, models.Permission.object_id == object_id)
            .scalar()
        )
        permission = self._new_permission(role, flags)
        permission.object_type = type_name
        permission.object_id = object_id
        permission.position = 0 if last_position is None else last_position + 1
        self.db.add(permission)
        logger.debug(f"Granted {permission!r} on {type_name}({object_id})")
        return permission

    @staticmethod
    def _new_permission(role: models.Role, flags: dict) -> models.Permission:
        unknown = set(flags) - set(models.PERMISSION_FLAGS)
        if unknown:
            raise InvalidArgumentError(f"Unknown permission flags: {sorted(unknown)}")
        values = {name: bool(flags.get(name, False)) for name in models.PERMISSION_FLAGS}
        return models.Permission(role=role, **values)
