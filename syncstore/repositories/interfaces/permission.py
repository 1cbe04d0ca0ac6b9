from abc import ABC, abstractmethod
from typing import List, Optional
from syncstore.database import models

class IPermissionRepository(ABC):
    @abstractmethod
    def get_realm_permissions(self) -> Optional[models.RealmPermissions]:
        """스토어 범위의 권한 컨테이너(싱글턴)를 조회합니다. 아직 없으면 None."""
        pass

    @abstractmethod
    def find_class_permissions(self, class_name: str) -> Optional[models.ClassPermissions]:
        """타입 이름으로 타입 범위의 권한 컨테이너를 조회합니다."""
        pass

    @abstractmethod
    def list_object_permissions(self, type_name: str, object_id: str) -> List[models.Permission]:
        """특정 레코드에 붙은 권한 목록을 순서대로 조회합니다."""
        pass

    @abstractmethod
    def ensure_realm_permissions(self) -> models.RealmPermissions:
        """스토어 범위 컨테이너를 조회하고, 없으면 생성합니다."""
        pass

    @abstractmethod
    def ensure_class_permissions(self, class_name: str) -> models.ClassPermissions:
        """타입 범위 컨테이너를 조회하고, 없으면 생성합니다."""
        pass

    @abstractmethod
    def add_realm_permission(self, role: models.Role, **flags: bool) -> models.Permission:
        """스토어 범위에 역할의 권한 항목을 추가합니다."""
        pass

    @abstractmethod
    def add_class_permission(self, class_name: str, role: models.Role, **flags: bool) -> models.Permission:
        """타입 범위에 역할의 권한 항목을 추가합니다."""
        pass

    @abstractmethod
    def add_object_permission(self, type_name: str, object_id: str, role: models.Role, **flags: bool) -> models.Permission:
        """
        특정 레코드에 역할의 권한 항목을 추가합니다.

        Args:
            type_name: 레코드의 스키마 타입 이름.
            object_id: 문자열로 바꾼 레코드의 기본키.
            role: 권한을 받을 역할.
            flags: can_create, can_read 등 7개 플래그 중 허용할 것들.
        """
        pass
