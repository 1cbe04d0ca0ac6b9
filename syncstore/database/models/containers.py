from sqlalchemy import Column, Integer, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship
from ..database import Base

REALM_PERMISSIONS_ID = 0


class RealmPermissions(Base):
    """
    스토어 전체 범위의 권한 컨테이너입니다.
    스토어마다 하나만 존재하며(id=0), 스토어를 처음 열 때 시스템이 생성합니다.
    """
    __tablename__ = "realm_permissions"
    id = Column(Integer, primary_key=True, default=REALM_PERMISSIONS_ID)

    permissions = relationship(
        "Permission",
        order_by="Permission.position",
        collection_class=ordering_list("position"),
        cascade="all",
    )


class ClassPermissions(Base):
    """
    타입(클래스) 범위의 권한 컨테이너입니다.
    name은 대상 타입의 스키마 이름이며, 스키마의 타입마다 하나씩 존재합니다.
    """
    __tablename__ = "class_permissions"
    name = Column(String, primary_key=True)

    permissions = relationship(
        "Permission",
        order_by="Permission.position",
        collection_class=ordering_list("position"),
        cascade="all",
    )
