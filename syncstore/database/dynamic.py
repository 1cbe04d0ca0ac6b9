from typing import Any, List

from sqlalchemy import inspect

from syncstore.database.database import require_write_transaction


class DynamicObject:
    """
    모델 클래스를 직접 다루지 않고, 타입 이름과 필드 이름 문자열로 레코드에 접근하는 뷰입니다.
    항상 스토어에 저장된 레코드를 감싸며, 관리되지 않는 DynamicObject는 만들 수 없습니다.
    """

    def __init__(self, type_name: str, managed_object: Any):
        self.type_name = type_name
        self._obj = managed_object

    @property
    def managed_object(self) -> Any:
        return self._obj

    def field_names(self) -> List[str]:
        return [column.key for column in inspect(type(self._obj)).column_attrs]

    def get(self, field: str) -> Any:
        if field not in self.field_names():
            raise KeyError(f"'{self.type_name}' has no field '{field}'")
        return getattr(self._obj, field)

    def set(self, field: str, value: Any):
        """필드 값을 바꿉니다. 쓰기 트랜잭션 안에서만 호출할 수 있습니다."""
        require_write_transaction(inspect(self._obj).session, f"Updating '{self.type_name}'")
        if field not in self.field_names():
            raise KeyError(f"'{self.type_name}' has no field '{field}'")
        setattr(self._obj, field, value)

    def __eq__(self, other):
        return isinstance(other, DynamicObject) and other._obj is self._obj

    def __hash__(self):
        return id(self._obj)

    def __repr__(self):
        return f"<DynamicObject {self.type_name}>"
