"""
Shared module for code used by the REST API and the offline client.

STRUCTURE:
- shared.security: Authentication and request protection
  - auth.py: SessionTokenCodec, session cookie dependencies
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy sessions, unit_of_work(), safe_commit()
  - correlation.py: X-Request-ID middleware and log filter

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Order/product/sync statuses, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - text.py: Slug generation

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, unit_of_work
    from shared.config.settings import get_settings
    from shared.config.constants import OrderStatus
    from shared.utils.exceptions import NotFoundError, ValidationError
"""
