from sqlmodel import create_engine, SQLModel, Session

from .config import settings

DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("sqlite"):
    print("--- Using SQLite database:", DATABASE_URL)
    connect_args = {"check_same_thread": False}
else:
    connect_args = {}

engine = create_engine(DATABASE_URL, echo=settings.db_echo, connect_args=connect_args)


def create_db_and_tables(bind=None):
    """
    Initializes the database by creating all tables defined by SQLModel.
    """
    print("Creating database and tables...")
    SQLModel.metadata.create_all(bind or engine, checkfirst=True)

    print("Database and tables created successfully.")


def get_session():
    """
    A FastAPI dependency to provide a database session to endpoints.
    """
    with Session(engine) as session:
        yield session
