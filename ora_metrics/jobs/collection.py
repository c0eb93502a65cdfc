"""
============================================================================
Collection Jobs - Collecte périodique des métriques Oracle
============================================================================
"""

from dagster import job

from ora_metrics.ops import gather_ora_metrics_op


@job(
    name="ora_collection_job",
    tags={"kind": "oracle"},
    description="Collecte des métriques Oracle (une connexion par exécution)",
)
def ora_collection_job():
    """
    Job de collecte : une seule op, pas de retry.
    Exécuté à chaque intervalle par ora_collection_schedule.
    """
    gather_ora_metrics_op()


__all__ = [
    "ora_collection_job",
]
