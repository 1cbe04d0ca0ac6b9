from sqlalchemy import Column, ForeignKey, String, Table, func, inspect, select
from sqlalchemy.orm import object_session, relationship

from syncstore.services.exceptions import StoreClosedError

from ..database import Base, require_write_transaction

# Role <-> PermissionUser 다대다 연관 테이블.
# 복합 기본키 (role_name, user_id)가 멤버십 조회용 인덱스 역할을 하며, 중복 멤버를 막습니다.
role_members = Table(
    "role_members",
    Base.metadata,
    Column("role_name", String, ForeignKey("roles.name", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String, ForeignKey("permission_users.id", ondelete="CASCADE"), primary_key=True),
)


class PermissionUser(Base):
    """
    권한 시스템에서 역할에 소속될 수 있는 사용자(principal)의 경량 레코드입니다.
    인증은 외부에서 끝난 상태이며, 여기서는 식별자만 보관합니다.
    """
    __tablename__ = "permission_users"
    id = Column(String, primary_key=True)

    roles = relationship("Role", secondary=role_members, back_populates="members")


class Role(Base):
    """
    여러 사용자를 묶는 이름 있는 그룹으로, 권한(Permission)을 부여하는 단위입니다.
    (예: 'everyone', 'editors').
    이름은 전역적으로 유일하며 생성 후 바뀌지 않습니다.
    """
    __tablename__ = "roles"
    name = Column(String, primary_key=True)

    members = relationship("PermissionUser", secondary=role_members, back_populates="roles")

    def __repr__(self):
        return f"<Role name={self.name!r}>"

    def add_member(self, user_id: str):
        """
        역할에 멤버를 추가합니다. 이미 멤버라면 아무것도 하지 않습니다.
        해당 사용자 레코드가 없으면 새로 만듭니다.

        Raises:
            NotInTransactionError: 쓰기 트랜잭션 밖에서 호출했을 때.
        """
        session = require_write_transaction(object_session(self), f"Changing members of role '{self.name}'")
        if self.has_member(user_id):
            return

        user = session.get(PermissionUser, user_id)
        if user is None:
            user = PermissionUser(id=user_id)
            session.add(user)
        self.members.append(user)

    def remove_member(self, user_id: str) -> bool:
        """
        역할에서 멤버를 제거합니다.

        Returns:
            실제로 제거되었으면 True, 멤버가 아니었으면 False.

        Raises:
            NotInTransactionError: 쓰기 트랜잭션 밖에서 호출했을 때.
        """
        session = require_write_transaction(object_session(self), f"Changing members of role '{self.name}'")
        user = session.get(PermissionUser, user_id)
        if user is None or not self.has_member(user_id):
            return False
        self.members.remove(user)
        return True

    def has_member(self, user_id: str) -> bool:
        """
        읽기 전용 멤버십 조회. 트랜잭션 밖에서도 호출할 수 있습니다.

        Raises:
            StoreClosedError: 역할을 읽어온 스토어가 이미 닫혔을 때.
        """
        session = object_session(self)
        if session is None:
            if inspect(self).detached:
                raise StoreClosedError(f"Role '{self.name}' belongs to a store that is already closed.")
            # 스토어에 붙지 않은 역할은 메모리상의 멤버 목록만 봅니다.
            return any(member.id == user_id for member in self.members)

        stmt = (
            select(func.count())
            .select_from(role_members)
            .where(role_members.c.role_name == self.name, role_members.c.user_id == user_id)
        )
        return session.execute(stmt).scalar() > 0
