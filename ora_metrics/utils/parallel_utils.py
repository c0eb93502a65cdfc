"""
============================================================================
Parallel Processing Utils - Exécution concurrente bornée par un délai
============================================================================
"""

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from ora_metrics.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class TaskResult(Generic[T]):
    """Résultat d'une tâche : valeur, exception ou dépassement du délai"""

    index: int
    value: Optional[T] = None
    error: Optional[BaseException] = None
    timed_out: bool = False
    duration_sec: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None and not self.timed_out


def run_tasks_with_deadline(
    tasks: Sequence[Callable[[], T]],
    timeout: float,
    description: str = "Running tasks",
    thread_name_prefix: str = "ora",
) -> list[TaskResult[T]]:
    """
    Exécute chaque tâche dans son propre thread, avec un délai par tâche

    Toutes les tâches démarrent ensemble (un thread par tâche), donc chacune
    dispose du même délai compté depuis la soumission.

    ⚠️ Une tâche qui dépasse le délai est abandonnée, pas interrompue :
    son thread continue jusqu'à ce que l'appel bloquant rende la main.

    Args:
        tasks: Fonctions sans argument
        timeout: Délai par tâche (secondes)
        description: Description pour les logs

    Returns:
        Un TaskResult par tâche, dans l'ordre des tâches
    """
    if not tasks:
        return []

    logger.debug(f"[PARALLEL] {description}", tasks=len(tasks), timeout=timeout)

    results = [TaskResult(index=i) for i in range(len(tasks))]
    executor = ThreadPoolExecutor(
        max_workers=len(tasks),
        thread_name_prefix=thread_name_prefix,
    )

    try:
        started = time.monotonic()
        future_to_index = {
            # Une copie du contexte par tâche : les contextvars structlog suivent le thread
            executor.submit(contextvars.copy_context().run, _timed, task): i
            for i, task in enumerate(tasks)
        }

        done, not_done = wait(future_to_index, timeout=timeout)

        for future in done:
            result = results[future_to_index[future]]
            try:
                result.value, result.duration_sec = future.result()
            except Exception as e:
                result.error = e
                result.duration_sec = time.monotonic() - started
                logger.error(f"[ERROR] {description}", task=result.index, error=str(e))

        for future in not_done:
            result = results[future_to_index[future]]
            result.timed_out = True
            result.duration_sec = time.monotonic() - started
    finally:
        # Ne pas attendre les tâches abandonnées
        executor.shutdown(wait=False, cancel_futures=True)

    failed = sum(1 for r in results if r.error is not None)
    timed_out = sum(1 for r in results if r.timed_out)
    logger.debug(
        f"[PARALLEL DONE] {description}",
        success=len(results) - failed - timed_out,
        failed=failed,
        timed_out=timed_out,
    )
    return results


def _timed(task: Callable[[], Any]) -> tuple[Any, float]:
    started = time.monotonic()
    value = task()
    return value, time.monotonic() - started
