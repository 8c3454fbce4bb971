from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from authapp.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite (local dev, tests) has no server-side pool to size, and its
    # connections are bound to the creating thread unless told otherwise.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # test connections before use; survives Postgres restarts
        "pool_size": 10,
        "max_overflow": 20,
    }


# ── Engine ────────────────────────────────────────────────────────────────────
engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────────
SessionLocal = sessionmaker(
    autocommit=False,   # the credential store commits explicitly, one record per write
    autoflush=False,
    bind=engine,
)


# ── Declarative Base ──────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    pass


# ── Dependency ────────────────────────────────────────────────────────────────
def get_db():
    """
    FastAPI dependency that yields a DB session and guarantees cleanup.
    Use as: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
