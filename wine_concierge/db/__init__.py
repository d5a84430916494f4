"""Database initialization and persistence layer."""

from wine_concierge.db.engine import (
    get_database_url,
    get_engine,
    get_session,
    init_db,
    run_migrations,
)
from wine_concierge.db.models import (
    Base,
    EnrichmentJobDB,
    WineDB,
    WineRatingDB,
)
from wine_concierge.db.repositories import (
    EnrichmentJobRepository,
    WineRatingRepository,
    WineRepository,
)

__all__ = [
    # Engine
    "get_database_url",
    "get_engine",
    "get_session",
    "init_db",
    "run_migrations",
    # Models
    "Base",
    "WineDB",
    "WineRatingDB",
    "EnrichmentJobDB",
    # Repositories
    "WineRepository",
    "WineRatingRepository",
    "EnrichmentJobRepository",
]
