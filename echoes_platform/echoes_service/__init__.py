"""
echoes_service package

Authenticated message relay for the Echoes platform.

- FastAPI application (`main.py`)
- SQLAlchemy models, database integration and stores (`models.py`, `db.py`, `repositories.py`)
- Password hashing and JWT issue/validation (`auth.py`), request gate (`gate.py`)
- Completion API client (`completion.py`)
- Pydantic schemas (`schemas.py`)
"""
