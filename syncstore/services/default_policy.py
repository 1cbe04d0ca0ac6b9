# syncstore/services/default_policy.py
"""
서버가 내려준 명시적 권한이 아직 없을 때 사용하는 기본 정책.

- 스토어 범위: 7개 플래그 모두 허용. 서버와 동기화되기 전에 로컬에서 스스로를 잠그면 안 됩니다.
- 타입/레코드 범위: 생성(create)과 삭제(delete)만 막고 나머지는 허용합니다.

'everyone' 역할은 실제 멤버 목록과 상관없이 모든 사용자와 매칭되며,
이 규칙은 이 모듈에서만 다룹니다.
"""
from syncstore.services.privileges import CLASS, OBJECT, STORE, Privileges

EVERYONE_ROLE = "everyone"

STORE_DEFAULT = Privileges.full()

CLASS_DEFAULT = Privileges(
    can_create=False,
    can_read=True,
    can_update=True,
    can_delete=False,
    can_query=True,
    can_set_permissions=True,
    can_modify_schema=True,
)

_TEMPLATES = {
    STORE: STORE_DEFAULT,
    CLASS: CLASS_DEFAULT,
    OBJECT: CLASS_DEFAULT,
}


def template_for(scope_kind: str) -> Privileges:
    """범위 종류에 해당하는 기본 권한 템플릿을 반환합니다."""
    try:
        return _TEMPLATES[scope_kind]
    except KeyError:
        raise ValueError(f"Unknown scope kind '{scope_kind}'.") from None


def is_everyone(role_name: str) -> bool:
    return role_name == EVERYONE_ROLE
