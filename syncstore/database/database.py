from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from syncstore.config import StoreConfig
from syncstore.services.exceptions import NotInTransactionError

# 모든 모델 클래스가 상속받을 Base 클래스
# 권한 모델(Role, Permission 등)과 사용자 정의 레코드 타입이 같은 메타데이터를 공유합니다.
Base = declarative_base()


def make_session_factory(config: StoreConfig) -> sessionmaker:
    """
    설정에 맞는 엔진을 만들고, 그 엔진에 묶인 세션 팩토리를 반환합니다.

    스토어 핸들 하나가 세션 하나를 소유하며, 스레드 검사는 핸들이 직접 수행하므로
    SQLite의 check_same_thread는 끕니다.
    """
    connect_args = {}
    if config.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(config.database_url, echo=config.echo, connect_args=connect_args)

    # autoflush=True: 같은 쓰기 트랜잭션 안에서 아직 커밋되지 않은 멤버십/권한 변경도 조회에 반영됩니다.
    return sessionmaker(autoflush=True, bind=engine)


def require_write_transaction(session, action: str):
    """
    세션을 소유한 스토어가 쓰기 트랜잭션 중인지 확인합니다.

    Raises:
        NotInTransactionError: 세션이 없거나, 스토어가 쓰기 트랜잭션 중이 아닐 때.
    """
    store = session.info.get("store") if session is not None else None
    if store is None or not store.is_in_write_transaction:
        raise NotInTransactionError(f"{action} requires an active write transaction.")
    return session
