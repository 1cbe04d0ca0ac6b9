# tests/services/test_access_service.py
import threading

import pytest

from syncstore.config import StoreConfig
from syncstore.database.dynamic import DynamicObject
from syncstore.repositories.sqlalchemy import SqlalchemyPermissionRepository, SqlalchemyRoleRepository
from syncstore.services.access_service import DynamicAccessor, TypedAccessor
from syncstore.services.default_policy import CLASS_DEFAULT, STORE_DEFAULT
from syncstore.services.exceptions import (
    CrossStoreReferenceError, InvalidArgumentError, StoreClosedError,
    UnknownTypeError, UnmanagedObjectError, WrongContextError
)
from syncstore.services.privileges import Privileges


def typed_entry_points(typed: TypedAccessor, model):
    return [
        lambda: typed.get_privileges(),
        lambda: typed.get_class_privileges(model),
        lambda: typed.get_object_privileges(None),
        lambda: typed.get_permissions(),
        lambda: typed.get_class_permissions(model),
        lambda: typed.get_roles(),
    ]


def dynamic_entry_points(dynamic: DynamicAccessor):
    return [
        lambda: dynamic.get_privileges(),
        lambda: dynamic.get_class_privileges("Document"),
        lambda: dynamic.get_object_privileges(None),
        lambda: dynamic.get_permissions(),
        lambda: dynamic.get_class_permissions("Document"),
        lambda: dynamic.get_roles(),
        lambda: dynamic.get_object("Document", 1),
    ]

# ===================================================================
#  로컬 기본 권한 테스트
# ===================================================================
class TestLocalDefaults:
    def test_store_privileges(self, typed: TypedAccessor, dynamic: DynamicAccessor):
        """스토어를 막 열었을 때 스토어 범위는 전체 권한인지 테스트합니다."""
        assert typed.get_privileges() == STORE_DEFAULT
        assert dynamic.get_privileges() == STORE_DEFAULT

    def test_class_privileges(self, typed, dynamic, document_model):
        """스토어를 막 열었을 때 타입 범위는 제한된 기본값인지 테스트합니다."""
        assert typed.get_class_privileges(document_model) == CLASS_DEFAULT
        assert dynamic.get_class_privileges("Document") == CLASS_DEFAULT

    def test_object_privileges(self, store, typed, dynamic, document_model):
        """새로 만든 레코드는 제한된 기본값을 가지는지 테스트합니다."""
        # === Arrange ===
        with store.write():
            obj = store.create_object(document_model, id=0)
            dynamic_obj = dynamic.create_object("Document", id=1)

        # === Act & Assert ===
        assert typed.get_object_privileges(obj) == CLASS_DEFAULT
        assert dynamic.get_object_privileges(dynamic_obj) == CLASS_DEFAULT

    def test_store_permissions_container(self, typed: TypedAccessor, dynamic: DynamicAccessor):
        """스토어 범위 컨테이너에 'everyone'의 전체 권한 항목 하나만 있는지 테스트합니다."""
        for accessor in (typed, dynamic):
            permissions = accessor.get_permissions().permissions
            assert len(permissions) == 1
            assert permissions[0].role.name == "everyone"
            assert Privileges.from_permission(permissions[0]) == STORE_DEFAULT

    def test_class_permissions_container(self, typed, dynamic, document_model):
        """타입 범위 컨테이너에 'everyone'의 기본 권한 항목 하나만 있는지 테스트합니다."""
        for container in (typed.get_class_permissions(document_model), dynamic.get_class_permissions("Document")):
            assert container.name == "Document"
            assert len(container.permissions) == 1
            assert container.permissions[0].role.name == "everyone"
            assert Privileges.from_permission(container.permissions[0]) == CLASS_DEFAULT

    def test_roles(self, store, typed: TypedAccessor):
        """역할 목록에 'everyone'이 있고, 현재 사용자가 멤버인지 테스트합니다."""
        roles = typed.get_roles()

        assert [role.name for role in roles] == ["everyone"]
        assert roles[0].has_member(store.identity)

    def test_bare_store_without_everyone_entries(self, bare_store, document_model):
        """'everyone'의 명시적 항목이 전혀 없어도 기본 정책이 적용되는지 테스트합니다."""
        typed = TypedAccessor(bare_store)

        assert typed.get_permissions().permissions == []
        assert typed.get_roles() == []
        assert typed.get_privileges() == Privileges.full()
        assert typed.get_class_privileges(document_model) == CLASS_DEFAULT

# ===================================================================
#  서버가 내려준 권한(grant) 적용 테스트
# ===================================================================
class TestGrants:
    def test_editors_scenario(self, open_store, bare_config, document_model):
        """'editors'에 delete를 준 경우, 멤버와 비멤버의 권한이 다른지 테스트합니다."""
        # === Arrange ===
        # 시나리오: 'everyone'은 어떤 범위에도 명시적 항목이 없음
        alice_store = open_store(bare_config, "alice")
        with alice_store.write():
            editors = SqlalchemyRoleRepository(alice_store.session).get_or_create("editors")
            editors.add_member("alice")
            SqlalchemyPermissionRepository(alice_store.session).add_class_permission(
                "Document", editors, can_delete=True
            )
        bob_store = open_store(bare_config, "bob")

        # === Act ===
        alice_privileges = TypedAccessor(alice_store).get_class_privileges(document_model)
        bob_privileges = DynamicAccessor(bob_store).get_class_privileges("Document")

        # === Assert ===
        assert alice_privileges.can_delete is True
        assert alice_privileges.can_create is False
        assert bob_privileges == CLASS_DEFAULT

    def test_object_scope_grant(self, store, typed, document_model):
        """레코드에 붙은 권한이 그 레코드에만 적용되는지 테스트합니다."""
        with store.write():
            granted = store.create_object(document_model, id=10)
            other = store.create_object(document_model, id=11)
            owners = SqlalchemyRoleRepository(store.session).get_or_create("owners")
            owners.add_member(store.identity)
            SqlalchemyPermissionRepository(store.session).add_object_permission(
                "Document", store.object_key(granted), owners, can_create=True, can_delete=True
            )

        assert typed.get_object_privileges(granted) == CLASS_DEFAULT | Privileges(can_create=True, can_delete=True)
        assert typed.get_object_privileges(other) == CLASS_DEFAULT

    def test_restrictive_everyone_entry(self, store, typed):
        """서버가 'everyone' 항목을 읽기 전용으로 바꾸면 그대로 반영되는지 테스트합니다."""
        with store.write():
            container = SqlalchemyPermissionRepository(store.session).get_realm_permissions()
            entry = container.permissions[0]
            for flag in ("can_create", "can_update", "can_delete", "can_set_permissions", "can_modify_schema"):
                setattr(entry, flag, False)

        assert typed.get_privileges() == Privileges(can_read=True, can_query=True)

    def test_sees_changes_committed_by_another_handle(self, open_store, store_config, document_model):
        """다른 핸들이 커밋한 권한 변경이 다음 조회에 반영되는지 테스트합니다."""
        reader = open_store(store_config, "alice")
        writer = open_store(store_config, "admin")
        typed = TypedAccessor(reader)
        assert typed.get_class_privileges(document_model).can_delete is False

        with writer.write():
            admins = SqlalchemyRoleRepository(writer.session).get_or_create("admins")
            admins.add_member("alice")
            SqlalchemyPermissionRepository(writer.session).add_class_permission("Document", admins, can_delete=True)

        assert typed.get_class_privileges(document_model).can_delete is True

# ===================================================================
#  호출 맥락 검증 테스트
# ===================================================================
class TestClosedStore:
    def test_every_entry_point_fails(self, store, typed, dynamic, document_model):
        """스토어를 닫은 뒤에는 모든 진입점이 StoreClosedError를 내는지 테스트합니다."""
        store.close()

        for call in typed_entry_points(typed, document_model) + dynamic_entry_points(dynamic):
            with pytest.raises(StoreClosedError):
                call()


class TestWrongContext:
    def test_every_entry_point_fails_from_other_thread(self, typed, dynamic, document_model):
        """다른 스레드에서 호출하면 모든 진입점이 WrongContextError를 내는지 테스트합니다."""
        calls = typed_entry_points(typed, document_model) + dynamic_entry_points(dynamic)
        errors = []

        def worker():
            for call in calls:
                try:
                    call()
                except Exception as e:
                    errors.append(e)
                else:
                    errors.append(None)

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join(timeout=10)

        assert len(errors) == len(calls)
        assert all(isinstance(e, WrongContextError) for e in errors)


class TestArgumentValidation:
    def test_class_not_in_schema(self, typed, dynamic, dog_model):
        """스키마에 없는 타입은 UnknownTypeError가 발생하는지 테스트합니다."""
        with pytest.raises(UnknownTypeError):
            typed.get_class_privileges(dog_model)
        with pytest.raises(UnknownTypeError):
            dynamic.get_class_privileges("Dog")
        with pytest.raises(UnknownTypeError):
            dynamic.get_class_privileges("Ghost")

    def test_null_class(self, typed, dynamic):
        """타입 인자가 None이면 InvalidArgumentError가 발생하는지 테스트합니다."""
        with pytest.raises(InvalidArgumentError):
            typed.get_class_privileges(None)
        with pytest.raises(InvalidArgumentError):
            dynamic.get_class_privileges(None)

    def test_wrong_argument_kind(self, typed, dynamic, document_model):
        with pytest.raises(InvalidArgumentError):
            typed.get_class_privileges("Document")
        with pytest.raises(InvalidArgumentError):
            dynamic.get_class_privileges(document_model)
        with pytest.raises(InvalidArgumentError):
            typed.get_object_privileges(document_model)

    def test_null_object(self, typed, dynamic):
        """객체 인자가 None이면 InvalidArgumentError가 발생하는지 테스트합니다."""
        with pytest.raises(InvalidArgumentError):
            typed.get_object_privileges(None)
        with pytest.raises(InvalidArgumentError):
            dynamic.get_object_privileges(None)

    def test_unmanaged_object(self, typed, document_model):
        """스토어에 저장되지 않은 객체는 UnmanagedObjectError가 발생하는지 테스트합니다."""
        with pytest.raises(UnmanagedObjectError):
            typed.get_object_privileges(document_model(id=0))

    def test_object_of_unregistered_type(self, store, typed, dog_model):
        with pytest.raises(UnknownTypeError):
            typed.get_object_privileges(dog_model(id=0))

    def test_object_from_other_store(self, open_store, tmp_path, typed, document_model):
        """다른 스토어의 객체를 넘기면 CrossStoreReferenceError가 발생하는지 테스트합니다."""
        # === Arrange ===
        other_store = open_store(StoreConfig(database_url=f"sqlite:///{tmp_path / 'other.db'}"))
        with other_store.write():
            obj = other_store.create_object(document_model, id=0)

        # === Act & Assert ===
        with pytest.raises(CrossStoreReferenceError):
            typed.get_object_privileges(obj)

    def test_closed_check_comes_before_argument_checks(self, store, typed, dynamic):
        """닫힌 스토어에 None을 넘겨도 StoreClosedError가 먼저 발생하는지 테스트합니다."""
        store.close()
        with pytest.raises(StoreClosedError):
            typed.get_class_privileges(None)
        with pytest.raises(StoreClosedError):
            dynamic.get_object_privileges(None)


class TestDynamicObject:
    def test_field_access(self, store, dynamic):
        with store.write():
            obj = dynamic.create_object("Document", id=3, title="draft")
            obj.set("title", "final")

        assert isinstance(obj, DynamicObject)
        assert obj.get("title") == "final"
        assert set(obj.field_names()) == {"id", "title"}

    def test_create_unknown_type(self, store, dynamic):
        with store.write():
            with pytest.raises(UnknownTypeError):
                dynamic.create_object("Ghost", id=1)

    def test_lookup_committed_record_by_primary_key(self, open_store, store_config, store, dynamic):
        """다른 핸들이 커밋한 레코드를 기본키로 찾아 레코드 범위 권한을 계산하는지 테스트합니다."""
        # === Arrange ===
        writer = open_store(store_config, "admin")
        with writer.write():
            writer.create_object(writer.schema.get_type("Document"), id=5, title="shared")
            editors = SqlalchemyRoleRepository(writer.session).get_or_create("editors")
            editors.add_member("alice")
            SqlalchemyPermissionRepository(writer.session).add_object_permission("Document", "5", editors, can_delete=True)

        # === Act ===
        obj = dynamic.get_object("Document", 5)
        privileges = dynamic.get_object_privileges(obj)

        # === Assert ===
        assert obj.get("title") == "shared"
        assert privileges == CLASS_DEFAULT | Privileges(can_delete=True)

    def test_lookup_missing_record(self, dynamic):
        assert dynamic.get_object("Document", 404) is None

    def test_lookup_argument_checks(self, dynamic):
        with pytest.raises(UnknownTypeError):
            dynamic.get_object("Ghost", 1)
        with pytest.raises(InvalidArgumentError):
            dynamic.get_object("Document", None)
