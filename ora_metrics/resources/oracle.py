# ora_metrics/resources/oracle.py

from contextlib import contextmanager
from typing import Optional

from dagster import ConfigurableResource

from ora_metrics.core.identity import ConnectionIdentity, parse_connection_url
from ora_metrics.db.connection import open_connection


class OracleResource(ConfigurableResource):
    url: str
    call_timeout_ms: int = 0

    @contextmanager
    def get_connection(self, identity: Optional[ConnectionIdentity] = None):
        identity = identity or parse_connection_url(self.url)
        with open_connection(identity, call_timeout_ms=self.call_timeout_ms) as conn:
            yield conn
