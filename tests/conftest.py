# tests/conftest.py
import pytest
from sqlalchemy import Column, Integer, String

from syncstore.config import StoreConfig
from syncstore.database.database import Base
from syncstore.database.store import StoreHandle
from syncstore.services.access_service import DynamicAccessor, TypedAccessor

# ===================================================================
#  테스트용 레코드 모델
# ===================================================================

class Document(Base):
    """스키마에 등록해서 사용하는 테스트 레코드 타입."""
    __tablename__ = "test_documents"
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=True)


class Dog(Base):
    """테이블은 있지만 스키마에는 등록하지 않는 타입."""
    __tablename__ = "test_dogs"
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=True)

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def document_model():
    return Document


@pytest.fixture
def dog_model():
    return Dog


@pytest.fixture
def store_config(tmp_path) -> StoreConfig:
    """임시 디렉터리의 SQLite 파일을 사용하는 설정 (로컬 기본 권한 설치)."""
    return StoreConfig(database_url=f"sqlite:///{tmp_path / 'store.db'}")


@pytest.fixture
def bare_config(tmp_path) -> StoreConfig:
    """'everyone'의 명시적 권한 항목 없이 시작하는 설정."""
    return StoreConfig(database_url=f"sqlite:///{tmp_path / 'bare.db'}", install_local_defaults=False)


@pytest.fixture
def open_store():
    """테스트가 끝나면 열린 핸들을 모두 닫아주는 스토어 팩토리."""
    handles = []

    def _open(config: StoreConfig, identity: str = "alice", models=(Document,)) -> StoreHandle:
        handle = StoreHandle.open(config, identity, models)
        handles.append(handle)
        return handle

    yield _open
    for handle in handles:
        handle.close()


@pytest.fixture
def store(open_store, store_config) -> StoreHandle:
    return open_store(store_config)


@pytest.fixture
def bare_store(open_store, bare_config) -> StoreHandle:
    return open_store(bare_config)


@pytest.fixture
def typed(store) -> TypedAccessor:
    return TypedAccessor(store)


@pytest.fixture
def dynamic(store) -> DynamicAccessor:
    return DynamicAccessor(store)
