from dataclasses import dataclass, fields
from typing import Any, Union


@dataclass(frozen=True)
class Privileges:
    """
    한 사용자가 한 범위(scope)에서 실제로 가지는 권한을 병합한 결과입니다.
    저장되지 않으며, 조회할 때마다 새로 계산됩니다.
    """
    can_create: bool = False
    can_read: bool = False
    can_update: bool = False
    can_delete: bool = False
    can_query: bool = False
    can_set_permissions: bool = False
    can_modify_schema: bool = False

    @classmethod
    def none(cls) -> "Privileges":
        return cls()

    @classmethod
    def full(cls) -> "Privileges":
        return cls(**{f.name: True for f in fields(cls)})

    @classmethod
    def from_permission(cls, permission: Any) -> "Privileges":
        """Permission 모델(또는 같은 플래그 속성을 가진 객체)에서 값을 만듭니다."""
        return cls(**{f.name: bool(getattr(permission, f.name)) for f in fields(cls)})

    def __or__(self, other: "Privileges") -> "Privileges":
        # 플래그별 논리합: 가장 허용적인 권한이 이깁니다.
        if not isinstance(other, Privileges):
            return NotImplemented
        return Privileges(**{f.name: getattr(self, f.name) or getattr(other, f.name) for f in fields(self)})

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# --------------------------------------------------------------------------
## 권한 계산 범위 (Scope)
# --------------------------------------------------------------------------

STORE = "store"
CLASS = "class"
OBJECT = "object"


@dataclass(frozen=True)
class StoreScope:
    kind = STORE


@dataclass(frozen=True)
class ClassScope:
    name: str
    kind = CLASS


@dataclass(frozen=True)
class ObjectScope:
    """개별 레코드 범위. 레코드는 (타입 이름, 문자열로 바꾼 기본키)로 식별합니다."""
    type_name: str
    object_id: str
    kind = OBJECT


Scope = Union[StoreScope, ClassScope, ObjectScope]
