from typing import Any, List, Optional

from syncstore.database import models
from syncstore.database.dynamic import DynamicObject
from syncstore.database.store import StoreHandle
from syncstore.repositories.sqlalchemy import SqlalchemyPermissionRepository, SqlalchemyRoleRepository
from syncstore.services.exceptions import (
    CrossStoreReferenceError, InvalidArgumentError, StoreClosedError,
    UnknownTypeError, UnmanagedObjectError, WrongContextError
)
from syncstore.services.privilege_resolver import PrivilegeResolver
from syncstore.services.privileges import ClassScope, ObjectScope, Privileges, StoreScope


class AccessService:
    """
    권한 조회 요청의 호출 맥락을 검증한 뒤 PrivilegeResolver에 위임하는 공통 코어입니다.
    TypedAccessor와 DynamicAccessor가 이 코어를 함께 사용합니다.

    검증 순서:
        1. 스토어가 열려 있는지 (StoreClosedError)
        2. 스토어를 연 스레드에서 호출했는지 (WrongContextError)
        3. 타입이 None이 아닌지 (InvalidArgumentError), 스키마에 있는지 (UnknownTypeError)
        4. 객체가 None이 아닌지 (InvalidArgumentError), 관리되는 객체인지 (UnmanagedObjectError),
           이 스토어에 속하는지 (CrossStoreReferenceError)
    """

    def __init__(self, store: StoreHandle):
        self.store = store

    def check_context(self):
        if self.store.is_closed:
            raise StoreClosedError("This store handle is already closed.")
        if not self.store.is_owner_context():
            raise WrongContextError("Store handle accessed from a thread other than the one that opened it.")

    def check_type_name(self, type_name: str):
        if type_name is None:
            raise InvalidArgumentError("Non-null class or type name required.")
        if not self.store.schema.has_type(type_name):
            raise UnknownTypeError(f"Class '{type_name}' is not part of the schema.")

    def check_object(self, obj: Any):
        if obj is None:
            raise InvalidArgumentError("Non-null object required.")
        if not self.store.is_managed(obj):
            raise UnmanagedObjectError("Only managed objects have privileges; add the object to the store first.")
        if not self.store.owns(obj):
            raise CrossStoreReferenceError("Object belongs to a different store instance.")

    # ----------------------------------------------------------------------
    ## 권한(Privileges) 계산
    # ----------------------------------------------------------------------

    def store_privileges(self) -> Privileges:
        self.check_context()
        return self._resolver().resolve(self.store.identity, StoreScope())

    def class_privileges(self, type_name: str) -> Privileges:
        self.check_context()
        self.check_type_name(type_name)
        return self._resolver().resolve(self.store.identity, ClassScope(type_name))

    def object_privileges(self, type_name: str, obj: Any) -> Privileges:
        self.check_context()
        self.check_type_name(type_name)
        self.check_object(obj)
        scope = ObjectScope(type_name, self.store.object_key(obj))
        return self._resolver().resolve(self.store.identity, scope)

    # ----------------------------------------------------------------------
    ## 권한 컨테이너 / 역할 조회
    # ----------------------------------------------------------------------

    def store_permissions(self) -> models.RealmPermissions:
        self.check_context()
        self.store.refresh()
        return SqlalchemyPermissionRepository(self.store.session).get_realm_permissions()

    def class_permissions(self, type_name: str) -> models.ClassPermissions:
        self.check_context()
        self.check_type_name(type_name)
        self.store.refresh()
        return SqlalchemyPermissionRepository(self.store.session).find_class_permissions(type_name)

    def roles(self) -> List[models.Role]:
        self.check_context()
        self.store.refresh()
        return SqlalchemyRoleRepository(self.store.session).list_all()

    def _resolver(self) -> PrivilegeResolver:
        # 호출마다 새 Resolver를 만들며, 최신 커밋 상태를 읽도록 스냅샷을 갱신합니다.
        self.store.refresh()
        session = self.store.session
        return PrivilegeResolver(
            SqlalchemyPermissionRepository(session),
            SqlalchemyRoleRepository(session),
            self.store.schema,
        )


class TypedAccessor:
    """모델 클래스와 ORM 객체를 직접 다루는 접근 방식."""

    def __init__(self, store: StoreHandle):
        self._core = AccessService(store)
        self.store = store

    def _type_name(self, model_class) -> str:
        if model_class is None or not isinstance(model_class, type):
            raise InvalidArgumentError(f"Non-null model class required, got {model_class!r}.")
        type_name = self.store.schema.name_of(model_class)
        if type_name is None:
            raise UnknownTypeError(f"Class '{model_class.__name__}' is not part of the schema.")
        return type_name

    def get_privileges(self) -> Privileges:
        """스토어 전체 범위에서 현재 사용자의 권한을 반환합니다."""
        return self._core.store_privileges()

    def get_class_privileges(self, model_class: type) -> Privileges:
        """
        특정 타입 범위에서 현재 사용자의 권한을 반환합니다.

        Raises:
            StoreClosedError, WrongContextError, InvalidArgumentError, UnknownTypeError
        """
        self._core.check_context()
        return self._core.class_privileges(self._type_name(model_class))

    def get_object_privileges(self, obj: Any) -> Privileges:
        """
        특정 레코드 범위에서 현재 사용자의 권한을 반환합니다.

        Raises:
            StoreClosedError, WrongContextError, InvalidArgumentError, UnknownTypeError,
            UnmanagedObjectError, CrossStoreReferenceError
        """
        self._core.check_context()
        if obj is None or isinstance(obj, type):
            raise InvalidArgumentError(f"Non-null model instance required, got {obj!r}.")
        return self._core.object_privileges(self._type_name(type(obj)), obj)

    def get_permissions(self) -> models.RealmPermissions:
        return self._core.store_permissions()

    def get_class_permissions(self, model_class: type) -> models.ClassPermissions:
        self._core.check_context()
        return self._core.class_permissions(self._type_name(model_class))

    def get_roles(self) -> List[models.Role]:
        return self._core.roles()


class DynamicAccessor:
    """타입 이름 문자열과 DynamicObject로 다루는 스키마 없는(schema-less) 접근 방식."""

    def __init__(self, store: StoreHandle):
        self._core = AccessService(store)
        self.store = store

    @staticmethod
    def _type_name(type_name) -> str:
        if type_name is None or not isinstance(type_name, str):
            raise InvalidArgumentError(f"Non-null type name required, got {type_name!r}.")
        return type_name

    def create_object(self, type_name: str, **values) -> DynamicObject:
        """타입 이름으로 레코드를 만들고 DynamicObject로 감싸 반환합니다. 쓰기 트랜잭션이 필요합니다."""
        self._core.check_context()
        self._core.check_type_name(self._type_name(type_name))
        obj = self.store.create_object(self.store.schema.get_type(type_name), **values)
        return DynamicObject(type_name, obj)

    def get_object(self, type_name: str, primary_key: Any) -> Optional[DynamicObject]:
        """
        타입 이름과 기본키로 저장된 레코드를 찾아 DynamicObject로 감싸 반환합니다.
        레코드가 없으면 None을 반환합니다.

        Raises:
            StoreClosedError, WrongContextError, InvalidArgumentError, UnknownTypeError
        """
        self._core.check_context()
        self._core.check_type_name(self._type_name(type_name))
        if primary_key is None:
            raise InvalidArgumentError("Non-null primary key required.")
        self.store.refresh()
        obj = self.store.session.get(self.store.schema.get_type(type_name), primary_key)
        return DynamicObject(type_name, obj) if obj is not None else None

    def get_privileges(self) -> Privileges:
        return self._core.store_privileges()

    def get_class_privileges(self, type_name: str) -> Privileges:
        self._core.check_context()
        return self._core.class_privileges(self._type_name(type_name))

    def get_object_privileges(self, dynamic_object: DynamicObject) -> Privileges:
        self._core.check_context()
        if dynamic_object is None or not isinstance(dynamic_object, DynamicObject):
            raise InvalidArgumentError(f"Non-null DynamicObject required, got {dynamic_object!r}.")
        return self._core.object_privileges(dynamic_object.type_name, dynamic_object.managed_object)

    def get_permissions(self) -> models.RealmPermissions:
        return self._core.store_permissions()

    def get_class_permissions(self, type_name: str) -> models.ClassPermissions:
        self._core.check_context()
        return self._core.class_permissions(self._type_name(type_name))

    def get_roles(self) -> List[models.Role]:
        return self._core.roles()
