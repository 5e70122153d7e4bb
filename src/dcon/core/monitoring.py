"""Sentry integration for error tracking and performance monitoring.

Sentry is initialized early in the CLI callback after logging setup.
Without ``DCON_SENTRY_DSN`` the SDK runs with a disabled client, so
spans and captures are no-ops.
"""

import os

import sentry_sdk

from dcon.__about__ import __version__

SENTRY_DSN_ENV = "DCON_SENTRY_DSN"


def setup_sentry(environment: str = "local") -> None:
    """Initialize Sentry from the environment."""
    sentry_sdk.init(
        dsn=os.environ.get(SENTRY_DSN_ENV) or None,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
