"""
Definitions Dagster - Collecte Oracle
"""

from dagster import Definitions

from ora_metrics.config.settings import get_settings
from ora_metrics.jobs.collection import ora_collection_job
from ora_metrics.resources.oracle import OracleResource
from ora_metrics.schedules.collection_schedules import ora_collection_schedule
from ora_metrics.utils.logging import setup_logging


# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------
setup_logging()
settings = get_settings()


# ---------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------
definitions = Definitions(
    jobs=[
        ora_collection_job,
    ],

    schedules=[
        ora_collection_schedule,       # ORA_COLLECTION_CRON (toutes les minutes)
    ],

    sensors=[],

    resources={
        "oracle": OracleResource(
            url=settings.ora_url,
            call_timeout_ms=settings.call_timeout_ms,
        ),
    },
)
