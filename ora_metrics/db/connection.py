"""
============================================================================
Database Connection - Connexion Oracle (une par collecte, sans pool)
============================================================================
"""
from contextlib import contextmanager
from typing import Any, Generator

import oracledb

from ora_metrics.core.errors import OracleConnectionError
from ora_metrics.core.identity import ConnectionIdentity
from ora_metrics.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def open_connection(
    identity: ConnectionIdentity,
    call_timeout_ms: int = 0,
) -> Generator[Any, None, None]:
    """
    Context manager : ouvre une connexion Oracle et la ferme en sortie

    Args:
        identity: Identité issue de l'URL (user, password, dsn)
        call_timeout_ms: Timeout driver par aller-retour (0 = désactivé)
    """
    try:
        conn = oracledb.connect(
            user=identity.user,
            password=identity.password,
            dsn=identity.dsn,
        )
    except oracledb.Error as e:
        logger.error("Oracle connection failed", dsn=identity.dsn, error=str(e))
        raise OracleConnectionError(identity.dsn, e) from e

    if call_timeout_ms:
        conn.call_timeout = call_timeout_ms

    logger.debug("Oracle connection opened", dsn=identity.dsn)

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Oracle connection closed", dsn=identity.dsn)
        except oracledb.Error as e:
            logger.warning("Oracle connection close failed", dsn=identity.dsn, error=str(e))


def cancel_pending(conn: Any) -> None:
    """
    Interrompre les appels encore en cours sur la connexion

    Appelé après la collecte quand des requêtes ont dépassé leur délai :
    toutes les autres requêtes sont terminées à ce stade.
    """
    cancel = getattr(conn, "cancel", None)
    if cancel is None:
        return
    try:
        cancel()
        logger.info("Pending Oracle calls cancelled")
    except oracledb.Error as e:
        logger.warning("Oracle cancel failed", error=str(e))
