"""
Database connection and session management for the Friendships API
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from friends_api.core.config import settings

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()

# Process-wide connection pool, created lazily and torn down on shutdown
_engine = None
_session_local = None


def get_engine():
    """Get database engine, creating the connection pool on first use"""
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.DATABASE_URL,
            pool_pre_ping=True,                          # Test connections before using
            pool_size=settings.DATABASE_POOL_SIZE,       # Connection pool size
            max_overflow=settings.DATABASE_MAX_OVERFLOW,  # Overflow connections allowed
            echo=settings.DEBUG and settings.LOG_LEVEL.upper() == "DEBUG"
        )
        logger.info(
            f"Database pool configured: size={settings.DATABASE_POOL_SIZE}, "
            f"max_overflow={settings.DATABASE_MAX_OVERFLOW}"
        )
    return _engine


def get_session_local():
    """Session factory bound to the shared engine"""
    global _session_local
    if _session_local is None:
        _session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())
    return _session_local


def get_db():
    """
    Dependency for getting database session in endpoints

    Usage in FastAPI endpoints:
        def my_endpoint(db: Session = Depends(get_db)):
            ...
    """
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables"""
    # Import models so they are registered on Base.metadata
    from friends_api import models  # noqa: F401
    Base.metadata.create_all(bind=get_engine())


def dispose_engine():
    """Close every pooled connection and forget the engine"""
    global _engine, _session_local
    if _engine is not None:
        _engine.dispose()
        logger.info("Database connection pool disposed")
    _engine = None
    _session_local = None
