from progress_tracker.infrastructure.database.session import AsyncSessionLocal, Base, get_db

__all__ = ["AsyncSessionLocal", "Base", "get_db"]
