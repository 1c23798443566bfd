"""Infrastructure layer: database, migrations, and the registry repository.

The database package depends only on stdlib and third-party libs
(SQLAlchemy, Alembic). The service layer bridges between domain models
and infrastructure.
"""
