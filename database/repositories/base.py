from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def insert(self, model):
        """Dialect-specific INSERT supporting ON CONFLICT clauses."""
        dialect = self.db.get_bind().dialect.name
        if dialect == 'postgresql':
            return postgresql.insert(model)
        if dialect == 'sqlite':
            return sqlite.insert(model)
        raise NotImplementedError(f"Upserts are not supported on {dialect}")
