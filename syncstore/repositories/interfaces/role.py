from abc import ABC, abstractmethod
from typing import List, Optional
from syncstore.database import models

class IRoleRepository(ABC):
    @abstractmethod
    def find_by_name(self, name: str) -> Optional[models.Role]:
        """이름으로 특정 역할을 조회합니다."""
        pass

    @abstractmethod
    def get_or_create(self, name: str) -> models.Role:
        """
        이름으로 역할을 조회하고, 없으면 새로 만듭니다.
        쓰기 트랜잭션 안에서만 호출할 수 있습니다.
        """
        pass

    @abstractmethod
    def list_all(self) -> List[models.Role]:
        """모든 역할을 이름순으로 조회합니다."""
        pass

    @abstractmethod
    def has_member(self, role: models.Role, user_id: str) -> bool:
        """역할에 해당 사용자가 멤버로 속해 있는지 확인합니다."""
        pass
