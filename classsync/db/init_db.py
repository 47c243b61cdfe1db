from sqlalchemy.engine import Engine

from classsync.db.base_class import Base
from classsync.db.session import engine as default_engine

# import models so SQLAlchemy registers them
from classsync.models import assignment, course, enrollment, submission, user  # noqa: F401


def init_db(bind: Engine | None = None) -> None:
    Base.metadata.create_all(bind=bind or default_engine)
