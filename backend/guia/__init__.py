"""
Guia Backend — Application Package Initializer
================================================

What: Business directory and review API (restaurants, hotels, taxis, gyms,
      supermarkets, tourism spots, movie theaters, emergency services).
Who:  Imported by uvicorn (`guia.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← search, mutation, ratings, auth
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Everything a request needs (settings, engine, services) hangs off one
    AppContext (see context.py) stored on `app.state.context`.
"""

__version__ = "1.0.0"
