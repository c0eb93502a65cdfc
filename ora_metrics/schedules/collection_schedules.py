"""Schedules collecte Oracle"""
from dagster import (
    DagsterRunStatus,
    DefaultScheduleStatus,
    RunRequest,
    RunsFilter,
    SkipReason,
    schedule,
)

from ora_metrics.config.settings import get_settings
from ora_metrics.jobs.collection import ora_collection_job
from ora_metrics.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

# Statuts d'un run pas encore terminé
ACTIVE_RUN_STATUSES = [
    DagsterRunStatus.QUEUED,
    DagsterRunStatus.NOT_STARTED,
    DagsterRunStatus.STARTING,
    DagsterRunStatus.STARTED,
    DagsterRunStatus.CANCELING,
]


def collection_tick(context):
    """
    Décision d'un tick : une collecte au plus à la fois

    Chaque run Dagster tourne dans son propre processus : le verrou du
    collecteur ne suffit pas, le schedule saute le tick tant qu'un run
    du job est encore actif.
    """
    active = context.instance.get_run_records(
        filters=RunsFilter(
            job_name=ora_collection_job.name,
            statuses=ACTIVE_RUN_STATUSES,
        ),
        limit=1,
    )
    if active:
        run_id = active[0].dagster_run.run_id
        logger.warning("Ora collection still running, tick skipped", run_id=run_id)
        return SkipReason(f"Run {run_id} de {ora_collection_job.name} encore en cours")

    return RunRequest()


# =============================================================================
# Collecte Oracle
# =============================================================================

@schedule(
    name="ora_collection",
    job=ora_collection_job,
    cron_schedule=settings.collection_cron,  # Par défaut toutes les minutes
    execution_timezone=settings.execution_timezone,
    description="Collecte des métriques Oracle à chaque intervalle (tick sauté si un run est actif)",
    default_status=DefaultScheduleStatus.RUNNING,
)
def ora_collection_schedule(context):
    return collection_tick(context)
