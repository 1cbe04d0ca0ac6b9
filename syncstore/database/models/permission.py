from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from ..database import Base

PERMISSION_FLAGS = (
    "can_create",
    "can_read",
    "can_update",
    "can_delete",
    "can_query",
    "can_set_permissions",
    "can_modify_schema",
)


class Permission(Base):
    """
    하나의 역할(Role)에 7개의 독립적인 작업 플래그를 부여하는 권한 항목입니다.
    스토어 전체(RealmPermissions), 타입(ClassPermissions), 개별 레코드 중
    정확히 하나의 범위에 포함되어 있습니다.
    플래그 사이에는 포함 관계가 없습니다. (can_update가 can_read를 뜻하지 않음)
    """
    __tablename__ = "permissions"
    id = Column(Integer, primary_key=True)
    role_name = Column(String, ForeignKey("roles.name"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    can_create = Column(Boolean, nullable=False, default=False)
    can_read = Column(Boolean, nullable=False, default=False)
    can_update = Column(Boolean, nullable=False, default=False)
    can_delete = Column(Boolean, nullable=False, default=False)
    can_query = Column(Boolean, nullable=False, default=False)
    can_set_permissions = Column(Boolean, nullable=False, default=False)
    can_modify_schema = Column(Boolean, nullable=False, default=False)

    # 소속 범위: 아래 셋 중 하나만 채워집니다.
    realm_permissions_id = Column(Integer, ForeignKey("realm_permissions.id"), nullable=True)
    class_permissions_name = Column(String, ForeignKey("class_permissions.name"), nullable=True)
    object_type = Column(String, nullable=True)
    object_id = Column(String, nullable=True)

    role = relationship("Role", lazy="joined")

    __table_args__ = (
        Index("ix_permissions_object", "object_type", "object_id"),
    )

    def flags(self) -> dict:
        return {name: bool(getattr(self, name)) for name in PERMISSION_FLAGS}

    def __repr__(self):
        granted = [name for name, value in self.flags().items() if value]
        role_name = self.role.name if self.role is not None else self.role_name
        return f"<Permission role={role_name!r} granted={granted}>"
