# syncstore/config.py
import logging
import os
from dataclasses import dataclass
from typing import Optional

import dotenv

dotenv.load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///syncstore.db"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    """
    스토어 연결 설정.

    Attributes:
        database_url: SQLAlchemy 연결 문자열.
        echo: SQL 출력 여부 (디버깅용).
        install_local_defaults: 처음 열 때 'everyone' 역할과 기본 권한 컨테이너를 생성할지 여부.
    """
    database_url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    install_local_defaults: bool = True

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """환경 변수(.env 포함)에서 설정을 읽어옵니다."""
        config = cls(
            database_url=os.getenv("SYNCSTORE_DATABASE_URL", DEFAULT_DATABASE_URL),
            echo=_env_flag("SYNCSTORE_DB_ECHO", "false"),
            install_local_defaults=_env_flag("SYNCSTORE_INSTALL_LOCAL_DEFAULTS", "true"),
        )
        logger.info(f"Store config: url={config.database_url}, install_local_defaults={config.install_local_defaults}")
        return config


def configure_logging(level: Optional[str] = None) -> int:
    """
    루트 로거를 설정하고 적용한 로그 레벨을 반환합니다.
    level이 없으면 SYNCSTORE_LOG_LEVEL(기본값 INFO)을 사용합니다.
    """
    level = level or os.getenv("SYNCSTORE_LOG_LEVEL", "INFO")
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    # 핸들러가 이미 있어도 레벨은 항상 적용합니다.
    logging.getLogger().setLevel(resolved)
    return resolved
