"""
============================================================================
Ops Gather - Collecte des métriques Oracle
============================================================================
"""

import threading

from dagster import Failure, Out, op

from ora_metrics.config.settings import get_settings
from ora_metrics.core.collector import OraCollector
from ora_metrics.core.sink import MemoryAccumulator

# Un collecteur par URL : son verrou empêche deux collectes simultanées
# dans le même processus
_collectors: dict[str, OraCollector] = {}
_collectors_lock = threading.Lock()


def get_collector(oracle) -> OraCollector:
    """Obtenir le collecteur associé à la ressource Oracle (singleton par URL)"""
    settings = get_settings()

    with _collectors_lock:
        collector = _collectors.get(oracle.url)
        if collector is None:
            collector = OraCollector(
                url=oracle.url,
                files=settings.ora_files,
                sql_seconds=settings.sql_timeout,
                measurement=settings.measurement,
                instance_tag=settings.instance_tag,
                connection_factory=oracle.get_connection,
            )
            _collectors[oracle.url] = collector
    return collector


def reset_collectors() -> None:
    """Vider le cache des collecteurs (utile pour tests)"""
    with _collectors_lock:
        _collectors.clear()


@op(
    name="gather_ora_metrics",
    out=Out(dict),
    required_resource_keys={"oracle"},
    tags={"kind": "oracle"},
    description="Exécute le catalogue SQL et collecte les métriques Oracle",
)
def gather_ora_metrics_op(context) -> dict:
    """
    Une collecte complète : catalogue → connexion → requêtes → métriques.

    Les lignes sont accumulées en mémoire puis journalisées au format
    line protocol (niveau debug).

    Returns:
        dict: lignes collectées, par requête

    Raises:
        Failure: si au moins une requête ou un fichier SQL a échoué
    """
    collector = get_collector(context.resources.oracle)
    sink = MemoryAccumulator()

    report = collector.collect(sink)

    for row in sink.rows:
        context.log.debug(row.to_line_protocol())

    summary = {
        "statements": len(report.outcomes),
        "failed_statements": len(report.failed),
        "file_errors": len(report.file_errors),
        "rows": len(sink),
        "rows_by_func": sink.rows_by_func(),
    }

    context.log.info(
        f"Ora gather: {summary['rows']} rows from {summary['statements']} statements "
        f"({summary['failed_statements']} failed, {summary['file_errors']} file errors)"
    )

    if report.error is not None:
        raise Failure(
            description=str(report.error),
            metadata={
                "statements": summary["statements"],
                "failed_statements": summary["failed_statements"],
                "file_errors": summary["file_errors"],
                "rows": summary["rows"],
            },
        )

    return summary
