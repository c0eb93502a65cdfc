"""
============================================================================
Connection Identity - Décomposition de l'URL Oracle
============================================================================
Format attendu : user/password@host:port/service/instance
============================================================================
"""

from dataclasses import dataclass, replace

from ora_metrics.config.constants import IDENTITY_TAGS
from ora_metrics.core.errors import ConnectionUrlError


@dataclass(frozen=True)
class ConnectionIdentity:
    """Identité dérivée de l'URL, utilisée pour taguer chaque métrique"""

    url: str
    user: str
    password: str
    host: str
    port: str
    service: str
    instance: str

    @property
    def dsn(self) -> str:
        """Chaîne Easy Connect : host:port/service/instance"""
        dsn = f"{self.host}:{self.port}/{self.service}"
        if self.instance:
            dsn += f"/{self.instance}"
        return dsn

    def tags(self) -> dict[str, str]:
        """Tags orahost/oraport/oraservice/orainstance non vides"""
        return {
            tag: getattr(self, attr)
            for attr, tag in IDENTITY_TAGS.items()
            if getattr(self, attr)
        }

    def with_instance(self, instance: str) -> "ConnectionIdentity":
        """Copie de l'identité avec une autre valeur d'instance (tag orainstance)"""
        return replace(self, instance=instance)

    def __repr__(self) -> str:
        return (
            f"ConnectionIdentity(user={self.user!r}, host={self.host!r}, "
            f"port={self.port!r}, service={self.service!r}, instance={self.instance!r})"
        )


def _split(url: str, segment: str, sep: str, expected: int) -> list[str]:
    parts = segment.split(sep)
    if len(parts) != expected:
        raise ConnectionUrlError(
            url, segment, f"expected {expected} parts around {sep!r}, found {len(parts)}"
        )
    return parts


def parse_connection_url(url: str) -> ConnectionIdentity:
    """
    Parser l'URL de connexion par découpage positionnel strict

    Args:
        url: user/password@host:port/service/instance

    Returns:
        ConnectionIdentity

    Raises:
        ConnectionUrlError: si un séparateur manque ou est en trop

    Example:
        "scott/tiger@10.0.0.5:1521/orcl/orcl1"
        → user="scott", password="tiger", host="10.0.0.5",
          port="1521", service="orcl", instance="orcl1"
    """
    credentials, address = _split(url, url, "@", 2)
    user, password = _split(url, credentials, "/", 2)
    host, remainder = _split(url, address, ":", 2)
    port, service, instance = _split(url, remainder, "/", 3)
    if not host:
        raise ConnectionUrlError(url, address, "host is required")

    return ConnectionIdentity(
        url=url,
        user=user,
        password=password,
        host=host,
        port=port,
        service=service,
        instance=instance,
    )
