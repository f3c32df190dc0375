"""Sentry and Logfire initialization - call before building the server."""

import logfire
import sentry_sdk

from pkgdocs.settings import GeneralSettings


def init_observability(settings: GeneralSettings, service_name: str) -> None:
    """Initialize error reporting and tracing.

    Both are no-ops without credentials. Logfire console output stays off so
    nothing is written to stdout, which carries the stdio transport.
    """
    sentry_sdk.init(
        dsn=settings.sentry_dsn or None,
        environment=settings.environment,
    )
    logfire.configure(
        token=settings.logfire_token or None,
        service_name=service_name,
        send_to_logfire="if-token-present",
        console=False,
    )
