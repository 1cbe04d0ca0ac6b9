import logging
from typing import List

from syncstore.database import models
from syncstore.repositories.interfaces import IPermissionRepository, IRoleRepository
from syncstore.services import default_policy
from syncstore.services.exceptions import InvalidPrincipalError, InvalidScopeError, UnknownTypeError
from syncstore.services.privileges import ClassScope, ObjectScope, Privileges, Scope, StoreScope

logger = logging.getLogger(__name__)


class PrivilegeResolver:
    """
    사용자(principal)와 범위(scope)가 주어지면, 역할 멤버십과 권한 항목을 합쳐
    실제 권한(Privileges)을 계산합니다.

    호출 사이에 아무 상태도 유지하지 않으며 캐시도 없습니다.
    매 호출마다 리포지토리를 통해 현재 커밋된 상태를 다시 읽습니다.
    """

    def __init__(self, permission_repo: IPermissionRepository, role_repo: IRoleRepository, schema):
        """
        Args:
            permission_repo: 범위별 권한 항목을 읽기 위한 리포지토리.
            role_repo: 역할 멤버십을 확인하기 위한 리포지토리.
            schema: 타입 이름의 존재 여부를 알려주는 스키마 (has_type(name) 제공).
        """
        self.permission_repo = permission_repo
        self.role_repo = role_repo
        self.schema = schema

    def resolve(self, principal: str, scope: Scope) -> Privileges:
        """
        주어진 범위에서 사용자의 권한을 계산합니다.

        1. 범위에 붙은 권한 항목들을 순서대로 가져옵니다.
        2. 'everyone' 역할이거나 사용자가 멤버인 역할의 항목만 남깁니다.
        3. 남은 항목들을 플래그별 논리합(OR)으로 병합합니다.
        4. 'everyone'의 명시적 항목이 이 범위에 없으면 기본 정책 템플릿도 함께 병합합니다.

        OR 병합이므로 항목 순서는 결과에 영향을 주지 않습니다.

        Raises:
            InvalidPrincipalError: principal이 비어 있거나 문자열이 아닐 때.
            UnknownTypeError: 범위가 가리키는 타입이 현재 스키마에 없을 때.
            InvalidScopeError: 알 수 없는 범위 값일 때.
        """
        if not isinstance(principal, str) or not principal.strip():
            raise InvalidPrincipalError(f"Invalid principal identifier: {principal!r}")

        permissions = self._permissions_for(scope)

        merged = Privileges.none()
        everyone_has_entry = False
        for permission in permissions:
            role = permission.role
            if default_policy.is_everyone(role.name):
                everyone_has_entry = True
                merged = merged | Privileges.from_permission(permission)
            elif self.role_repo.has_member(role, principal):
                merged = merged | Privileges.from_permission(permission)

        if not everyone_has_entry:
            merged = merged | default_policy.template_for(scope.kind)

        logger.debug(f"Resolved {scope} for '{principal}': {merged}")
        return merged

    def _permissions_for(self, scope: Scope) -> List[models.Permission]:
        if isinstance(scope, StoreScope):
            container = self.permission_repo.get_realm_permissions()
            return list(container.permissions) if container is not None else []

        if isinstance(scope, ClassScope):
            self._check_type(scope.name)
            container = self.permission_repo.find_class_permissions(scope.name)
            return list(container.permissions) if container is not None else []

        if isinstance(scope, ObjectScope):
            self._check_type(scope.type_name)
            return self.permission_repo.list_object_permissions(scope.type_name, scope.object_id)

        raise InvalidScopeError(f"Unsupported scope: {scope!r}")

    def _check_type(self, type_name: str):
        if not self.schema.has_type(type_name):
            raise UnknownTypeError(f"Class '{type_name}' is not part of the schema.")
