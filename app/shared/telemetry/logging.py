"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings
from app.core.request_context import get_request_id, get_tenant_id


class RequestContextFilter(logging.Filter):
    """Stamp each record with the request's tenant and request id ('-' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.tenant_id = get_tenant_id() or "-"
        record.request_id = get_request_id() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=log_level,
        format=(
            "%(asctime)s - %(name)s - %(levelname)s - "
            "[tenant=%(tenant_id)s request=%(request_id)s] %(message)s"
        ),
        handlers=[handler],
    )
    # Per-request transport chatter from the search client.
    logging.getLogger("elastic_transport.transport").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )
