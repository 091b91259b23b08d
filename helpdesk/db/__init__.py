from helpdesk.db.session import SessionLocal, create_db_engine, create_session_factory, engine, get_db

__all__ = ["SessionLocal", "create_db_engine", "create_session_factory", "engine", "get_db"]
