from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from tubely.config import get_settings

settings = get_settings()

# Sessions are used from the executor threads of the upload pipeline
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
