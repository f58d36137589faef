"""Base SQLAlchemy declarative base for all models"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    """Timezone-aware current time, used as client-side timestamp default.

    Client-side defaults keep sub-second ordering on stores whose NOW() has
    second resolution (SQLite).
    """
    return datetime.now(timezone.utc)


Base = declarative_base()
