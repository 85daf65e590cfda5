"""
Database connection and session factory.
MySQL over PyMySQL in production; any SQLAlchemy URL via DATABASE_URL.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from app_config.settings import DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    # Create database engine with connection pooling
    engine = create_engine(
        DATABASE_URL,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=False,  # Set to True for SQL debugging
        connect_args={
            "connect_timeout": 10,  # 10 second connection timeout
            "read_timeout": 60,  # 60 second read timeout for sweep queries
            "write_timeout": 30,
        }
    )

# Create SessionLocal class for database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for SQLAlchemy models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Use this in FastAPI endpoints with Depends(get_db).

    Example:
        @router.get("/bonuses/pending")
        def get_pending(db: Session = Depends(get_db)):
            return db.query(WeeklyBonus).filter(WeeklyBonus.status == "requested").all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
