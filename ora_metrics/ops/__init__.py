"""Ops - Point d'entrée"""

from .gather import gather_ora_metrics_op

__all__ = [
    "gather_ora_metrics_op",
]
