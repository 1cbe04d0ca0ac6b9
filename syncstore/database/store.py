# syncstore/database/store.py
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import InstanceState, Session

from syncstore.config import StoreConfig
from syncstore.database.database import Base, make_session_factory, require_write_transaction
from syncstore.database.db_init import initialize_store
from syncstore.services.exceptions import (
    InvalidPrincipalError, StoreClosedError, UnknownTypeError, WrongContextError
)

logger = logging.getLogger(__name__)


def schema_name(model_class) -> str:
    """모델 클래스의 스키마 이름. 기본값은 클래스 이름입니다."""
    return getattr(model_class, "__schema_name__", model_class.__name__)


class Schema:
    """스토어에 등록된 사용자 레코드 타입들 (타입 이름 -> 모델 클래스)."""

    def __init__(self, model_classes: Iterable[type] = ()):
        self._types: Dict[str, type] = {}
        for model_class in model_classes:
            self._types[schema_name(model_class)] = model_class

    def has_type(self, name: str) -> bool:
        return name in self._types

    def get_type(self, name: str) -> type:
        try:
            return self._types[name]
        except KeyError:
            raise UnknownTypeError(f"Class '{name}' is not part of the schema.") from None

    def name_of(self, model_class: type) -> Optional[str]:
        name = schema_name(model_class)
        return name if self._types.get(name) is model_class else None

    def names(self) -> List[str]:
        return sorted(self._types)


class StoreHandle:
    """
    트랜잭션 스토어에 대한 열린 핸들 하나를 나타냅니다.

    핸들은 SQLAlchemy 세션 하나를 소유하며, 핸들을 연 스레드에서만 사용할 수 있습니다.
    쓰기는 begin_transaction()/commit_transaction() 사이(또는 write() 블록 안)에서만 허용됩니다.
    """

    def __init__(self, config: StoreConfig, identity: str, models: Iterable[type] = ()):
        if not isinstance(identity, str) or not identity.strip():
            raise InvalidPrincipalError(f"Invalid principal identifier: {identity!r}")
        self.config = config
        self.identity = identity
        self.schema = Schema(models)
        self._session_factory = make_session_factory(config)
        self._session: Optional[Session] = None
        self._owner_thread: Optional[int] = None
        self._in_write_transaction = False

    @classmethod
    def open(cls, config: StoreConfig, identity: str, models: Iterable[type] = ()) -> "StoreHandle":
        """
        스토어를 열고, 필요한 테이블과 로컬 기본 권한 데이터를 준비합니다.

        Args:
            config: 연결 설정.
            identity: 이 핸들을 사용하는 (이미 인증된) 사용자의 식별자.
            models: 스키마에 포함할 사용자 레코드 모델 클래스들.
        """
        handle = cls(config, identity, models)
        handle._open()
        return handle

    def _open(self):
        engine = self._session_factory.kw["bind"]
        Base.metadata.create_all(bind=engine)

        self._session = self._session_factory()
        self._session.info["store"] = self
        self._owner_thread = threading.get_ident()
        logger.info(f"Opened store {self.config.database_url} for '{self.identity}'")

        with self.write():
            initialize_store(
                self._session, self.schema.names(), self.identity, self.config.install_local_defaults
            )

    # ----------------------------------------------------------------------
    ## 상태
    # ----------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        return self._session is None

    def is_owner_context(self) -> bool:
        return self._owner_thread == threading.get_ident()

    @property
    def is_in_write_transaction(self) -> bool:
        return self._in_write_transaction

    @property
    def session(self) -> Session:
        self._check_usable()
        return self._session

    def _check_usable(self):
        if self.is_closed:
            raise StoreClosedError("This store handle is already closed.")
        if not self.is_owner_context():
            raise WrongContextError("Store handle accessed from a thread other than the one that opened it.")

    def close(self):
        """핸들을 닫습니다. 진행 중인 쓰기 트랜잭션은 취소됩니다. 이미 닫혀 있으면 아무것도 하지 않습니다."""
        if self.is_closed:
            return
        self._check_usable()
        if self._in_write_transaction:
            logger.warning("Closing store with an open write transaction; rolling back.")
            self._session.rollback()
            self._in_write_transaction = False
        self._session.close()
        self._session = None
        self._session_factory.kw["bind"].dispose()
        logger.info(f"Closed store {self.config.database_url}")

    # ----------------------------------------------------------------------
    ## 트랜잭션
    # ----------------------------------------------------------------------

    def begin_transaction(self):
        self._check_usable()
        if self._in_write_transaction:
            raise RuntimeError("A write transaction is already in progress on this store.")
        # 쓰기 트랜잭션은 항상 최신 커밋 상태에서 시작합니다.
        self._session.rollback()
        self._in_write_transaction = True
        logger.debug("Write transaction started")

    def commit_transaction(self):
        self._check_usable()
        require_write_transaction(self._session, "Committing")
        try:
            self._session.commit()
        finally:
            self._in_write_transaction = False
        logger.debug("Write transaction committed")

    def cancel_transaction(self):
        self._check_usable()
        require_write_transaction(self._session, "Cancelling")
        self._session.rollback()
        self._in_write_transaction = False
        logger.debug("Write transaction cancelled")

    @contextmanager
    def write(self):
        """
        쓰기 트랜잭션 블록. 정상 종료 시 커밋하고, 예외가 나면 취소 후 예외를 다시 던집니다.

        사용 예시:
            with store.write():
                role.add_member("alice")
        """
        self.begin_transaction()
        try:
            yield self
        except Exception:
            self.cancel_transaction()
            raise
        self.commit_transaction()

    def refresh(self):
        """쓰기 트랜잭션 밖이라면 읽기 스냅샷을 버리고, 이후 조회가 최신 커밋 상태를 보도록 합니다."""
        self._check_usable()
        if not self._in_write_transaction:
            self._session.rollback()

    # ----------------------------------------------------------------------
    ## 레코드
    # ----------------------------------------------------------------------

    def create_object(self, model_class: type, **values):
        """스키마에 등록된 타입의 레코드를 만들고 스토어에 추가합니다. 쓰기 트랜잭션이 필요합니다."""
        session = require_write_transaction(self.session, f"Creating {model_class.__name__}")
        if self.schema.name_of(model_class) is None:
            raise UnknownTypeError(f"Class '{schema_name(model_class)}' is not part of the schema.")
        obj = model_class(**values)
        session.add(obj)
        session.flush()
        return obj

    def is_managed(self, obj) -> bool:
        """객체가 어떤 열린 세션에 저장(또는 추가)된 상태인지 확인합니다."""
        state = inspect(obj, raiseerr=False)
        if not isinstance(state, InstanceState) or state.session is None:
            return False
        return state.persistent or state.pending

    def owns(self, obj) -> bool:
        state = inspect(obj, raiseerr=False)
        return isinstance(state, InstanceState) and state.session is not None and state.session is self._session

    def object_key(self, obj) -> str:
        """레코드의 기본키를 문자열로 반환합니다. 복합키는 ','로 잇습니다."""
        state = inspect(obj)
        if state.key is None:
            self._session.flush()
        return ",".join(str(value) for value in inspect(obj).identity)
