import logging
from typing import Iterable

from sqlalchemy.orm import Session

from syncstore.repositories.sqlalchemy import SqlalchemyPermissionRepository, SqlalchemyRoleRepository
from syncstore.services.default_policy import CLASS_DEFAULT, EVERYONE_ROLE, STORE_DEFAULT

logger = logging.getLogger(__name__)


def initialize_store(db: Session, schema_names: Iterable[str], identity: str, install_local_defaults: bool = True):
    """
    스토어의 권한 컨테이너와 로컬 기본 권한 데이터를 만듭니다. 쓰기 트랜잭션 안에서 호출해야 합니다.

    - 스토어 범위 컨테이너(싱글턴)와 스키마 타입별 컨테이너를 항상 만듭니다.
    - install_local_defaults가 True이면:
      'everyone' 역할을 만들고 현재 사용자를 멤버로 추가한 뒤,
      스토어 범위에는 전체 권한을, 각 타입 범위에는 기본 권한을 'everyone'에게 줍니다.

    이미 있는 데이터는 건드리지 않으므로 여러 번 호출해도 안전합니다.
    새로 등록된 타입은 다음에 스토어를 열 때 컨테이너가 생깁니다.
    """
    role_repo = SqlalchemyRoleRepository(db)
    permission_repo = SqlalchemyPermissionRepository(db)

    realm_permissions = permission_repo.ensure_realm_permissions()
    class_permissions = {name: permission_repo.ensure_class_permissions(name) for name in schema_names}
    if not install_local_defaults:
        return

    everyone = role_repo.get_or_create(EVERYONE_ROLE)
    everyone.add_member(identity)

    if not realm_permissions.permissions:
        logger.info("Installing local default permissions for the store.")
        permission_repo.add_realm_permission(everyone, **STORE_DEFAULT.as_dict())

    for name, container in class_permissions.items():
        if not container.permissions:
            logger.info(f"Installing local default permissions for class '{name}'.")
            permission_repo.add_class_permission(name, everyone, **CLASS_DEFAULT.as_dict())
