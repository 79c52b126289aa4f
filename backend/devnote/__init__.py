"""
DevNote Backend - Application Package
=====================================

What:  Social blogging backend. Users register, write posts with a visibility
       level, follow each other, like and favorite posts, and decide which of
       their profile lists (followers, following, likes, favorites) are public.
Who:   Imported by uvicorn (`devnote.main:app`), Alembic, and pytest.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, viewer resolution
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Orchestration, ownership checks
    ├─────────────────────────────────────┤
    │      Policy (Visibility Rules)      │  ← Pure decisions, no I/O
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

The policy layer sits below the services: services snapshot the stored user
into an immutable profile value, ask the policy, and translate a denial into
an application exception that the global handlers render as 403/404.
"""

__version__ = "1.0.0"
