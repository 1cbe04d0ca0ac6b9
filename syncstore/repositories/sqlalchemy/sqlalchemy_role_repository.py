import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from syncstore.database import models
from syncstore.database.database import require_write_transaction
from syncstore.repositories.interfaces import IRoleRepository

logger = logging.getLogger(__name__)

class SqlalchemyRoleRepository(IRoleRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def find_by_name(self, name: str) -> Optional[models.Role]:
        return self.db.query(models.Role).filter(models.Role.name == name).first()

    def get_or_create(self, name: str) -> models.Role:
        role = self.find_by_name(name)
        if role is None:
            require_write_transaction(self.db, f"Creating role '{name}'")
            role = models.Role(name=name)
            self.db.add(role)
            logger.debug(f"Created role '{name}'")
        return role

    def list_all(self) -> List[models.Role]:
        return self.db.query(models.Role).order_by(models.Role.name.asc()).all()

    def has_member(self, role: models.Role, user_id: str) -> bool:
        return role.has_member(user_id)
