"""
TutorLedger Backend: Application Package Initializer
=====================================================

What: Tutoring-session tracking and payroll reconciliation service.
Who:  Imported by uvicorn (tutorledger.main:app), Alembic and pytest.

Architecture Note:
    The backend keeps the usual layered split:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, admin gate
    ├─────────────────────────────────────┤
    │   Services (Business Logic)         │  ← validation, workflow,
    │                                     │    payment, reports, CSV
    ├─────────────────────────────────────┤
    │   Store, Models & Schemas (Data)    │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The rate table, validator rules, aggregator and CSV renderer are plain
    functions with no database access, so they are tested directly.
"""

__version__ = "1.0.0"
