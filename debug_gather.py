#!/usr/bin/env python
"""
Script de debug : une collecte Oracle, métriques affichées en line protocol
"""

import os
import sys

# Configuration
os.environ.setdefault("ORA_FILES", "sql/default.sql")
os.environ.setdefault("LOG_FORMAT", "console")

from ora_metrics.config.settings import get_settings
from ora_metrics.core.collector import OraCollector
from ora_metrics.core.sink import LineProtocolAccumulator
from ora_metrics.utils.logging import setup_logging


def debug_gather() -> int:
    """Exécuter une collecte complète et afficher chaque ligne"""
    setup_logging()
    settings = get_settings()

    collector = OraCollector.from_settings(settings)
    sink = LineProtocolAccumulator(sys.stdout)

    print(f"🔍 {collector.description()}")
    print(f"   Files: {', '.join(str(f) for f in settings.ora_files)}")
    print(f"   Timeout per statement: {settings.sql_seconds}s")
    print("=" * 80)

    report = collector.collect(sink)

    print("=" * 80)
    print(f"✅ {sink.count} rows from {len(report.outcomes)} statements")

    for outcome in report.outcomes:
        status = "OK" if outcome.success else "FAIL"
        print(f"   [{status}] {outcome.name}: {outcome.rows} rows in {outcome.duration_sec:.2f}s")

    if report.error is not None:
        print(f"\n❌ ERREURS:")
        for error in report.error.errors:
            print(f"   {error}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(debug_gather())
