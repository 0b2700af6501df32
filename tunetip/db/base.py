# ============================================================================
# FILE: tunetip/db/base.py
# ============================================================================
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def import_models() -> None:
    """Import every model module so Base.metadata knows all tables"""
    import tunetip.db.models  # noqa: F401
