"""Runtime environment types.

Used by SessionSettings to pick environment-specific behaviour, most
notably the log renderer (JSON everywhere except local development).

Environments:
- DEVELOPMENT: Local development, human-readable logs
- TESTING: Automated test execution with isolated database
- CI: Continuous integration environment
- PRODUCTION: Production deployment
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"

    @property
    def wants_json_logs(self) -> bool:
        """Whether logs should be rendered as JSON in this environment."""
        return self is not Environment.DEVELOPMENT
