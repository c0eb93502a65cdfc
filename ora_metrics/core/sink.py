"""
============================================================================
Sink - Accumulateur recevant les métriques
============================================================================
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, TextIO

from ora_metrics.config.constants import FUNC_TAG


class Accumulator(Protocol):
    """Contrat du sink fourni par l'hôte (un appel par ligne)"""

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, int | float],
        tags: Mapping[str, str],
    ) -> None:
        ...


@dataclass
class MetricRow:
    measurement: str
    fields: dict[str, int | float]
    tags: dict[str, str]
    timestamp_ns: int = field(default_factory=time.time_ns)

    def to_line_protocol(self) -> str:
        return render_line(self.measurement, self.fields, self.tags, self.timestamp_ns)


class MemoryAccumulator:
    """Accumulateur en mémoire, thread-safe (une instance par collecte)"""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: list[MetricRow] = []

    def add_fields(self, measurement, fields, tags) -> None:
        row = MetricRow(measurement, dict(fields), dict(tags))
        with self._lock:
            self._rows.append(row)

    @property
    def rows(self) -> list[MetricRow]:
        with self._lock:
            return list(self._rows)

    def rows_by_func(self) -> dict[str, int]:
        """Nombre de lignes par requête (tag func)"""
        counts: dict[str, int] = {}
        for row in self.rows:
            name = row.tags.get(FUNC_TAG, "")
            counts[name] = counts.get(name, 0) + 1
        return counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


class LineProtocolAccumulator:
    """Ecrit chaque ligne au format Influx line protocol dans un flux texte"""

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._lock = threading.Lock()
        self.count = 0

    def add_fields(self, measurement, fields, tags) -> None:
        line = render_line(measurement, fields, tags, time.time_ns())
        if not line:
            return
        with self._lock:
            self._stream.write(line + "\n")
            self.count += 1


# =============================================================================
# Line protocol
# =============================================================================

def _escape_key(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


def _escape_measurement(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _format_field(value: int | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    return repr(float(value))


def render_line(
    measurement: str,
    fields: Mapping[str, int | float],
    tags: Mapping[str, str],
    timestamp_ns: Optional[int] = None,
) -> str:
    """
    Rendu line protocol : mesure,tag=v field=v timestamp

    Retourne une chaîne vide s'il n'y a aucun field (ligne invalide en Influx).
    Les tags à valeur vide sont omis.
    """
    if not fields:
        return ""

    head = _escape_measurement(measurement)
    for key in sorted(tags):
        if tags[key] == "":
            continue
        head += f",{_escape_key(key)}={_escape_key(tags[key])}"

    body = ",".join(
        f"{_escape_key(key)}={_format_field(fields[key])}" for key in sorted(fields)
    )

    line = f"{head} {body}"
    if timestamp_ns is not None:
        line += f" {timestamp_ns}"
    return line
