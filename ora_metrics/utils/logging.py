"""
============================================================================
Logging - Configuration logging structuré
============================================================================
Chaque événement émis pendant une collecte porte le contexte de la base
interrogée (collector, orahost, oraport, orainstance), y compris depuis les
threads d'exécution des requêtes.
============================================================================
"""
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

from ora_metrics.config.settings import get_settings

COLLECTOR_NAME = "ora"


def setup_logging() -> None:
    """Configure le logging structuré avec structlog"""
    settings = get_settings()

    # LOG_FORMAT=console force le rendu lisible (debug_gather.py, dagster dev)
    if settings.log_format == "console" or sys.stderr.isatty():
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@contextmanager
def bind_collection_context(identity, measurement: str) -> Iterator[None]:
    """
    Lier le contexte d'une collecte aux logs émis dans le bloc

    Args:
        identity: ConnectionIdentity utilisée pour les tags
        measurement: Nom de la mesure produite
    """
    with structlog.contextvars.bound_contextvars(
        collector=COLLECTOR_NAME,
        measurement=measurement,
        orahost=identity.host,
        oraport=identity.port,
        orainstance=identity.instance,
    ):
        yield


def get_logger(name: str) -> Any:
    """Obtenir un logger"""
    return structlog.get_logger(name)
