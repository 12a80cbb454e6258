"""
Reporting Configuration

Environment variables and settings for the reporting module.
Following pattern from the other module configs: a dataclass loaded once
with from_env().
"""

import os
from dataclasses import dataclass


@dataclass
class ReportingConfig:
    """Reporting configuration settings."""

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Saved reports returned with a template
    RECENT_SAVED_LIMIT: int = 10

    # Execution
    QUERY_TIMEOUT_MS: int = 0              # statement_timeout, 0 = disabled
    ENFORCE_PARAMETER_SCHEMA: bool = True  # False makes the schema advisory

    @classmethod
    def from_env(cls) -> 'ReportingConfig':
        """Load configuration from environment variables."""
        return cls(
            DEFAULT_PAGE_SIZE=int(os.environ.get('REPORTS_DEFAULT_PAGE_SIZE', '10')),
            MAX_PAGE_SIZE=int(os.environ.get('REPORTS_MAX_PAGE_SIZE', '100')),
            RECENT_SAVED_LIMIT=int(os.environ.get('REPORTS_RECENT_SAVED_LIMIT', '10')),
            QUERY_TIMEOUT_MS=int(os.environ.get('REPORT_QUERY_TIMEOUT_MS', '0')),
            ENFORCE_PARAMETER_SCHEMA=os.environ.get(
                'REPORTS_ENFORCE_PARAMETER_SCHEMA', 'true'
            ).lower() == 'true',
        )


_config = None


def get_config() -> ReportingConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = ReportingConfig.from_env()
    return _config


def reset_config():
    """Forget the cached configuration (tests change the environment)."""
    global _config
    _config = None
