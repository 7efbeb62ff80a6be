from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv
import os

load_dotenv()

# Path to your database file, override with DATABASE_URL
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/finance.db")
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def _connect_args(url):
    if make_url(url).get_backend_name() == "sqlite":
        return {"check_same_thread": False}
    return {}


# Create engine and session
engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables. Makes sure the folder of a file-backed SQLite database exists."""
    bind = bind or engine
    url = bind.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        folder = os.path.dirname(url.database)
        if folder:
            os.makedirs(folder, exist_ok=True)

    # Import models *AFTER* Base is defined
    from finance_dashboard.app.models.transaction_model import Transaction  # noqa: F401
    from finance_dashboard.app.models.budget_model import Budget  # noqa: F401

    Base.metadata.create_all(bind=bind)
