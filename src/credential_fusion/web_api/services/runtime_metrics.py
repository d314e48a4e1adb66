"""
In-memory runtime request metrics.
"""
from collections import defaultdict
from threading import Lock
from time import time
from typing import Dict


class RuntimeMetrics:
  """
  Process-local request counters for the health and metrics endpoints.
  """

  def __init__(self):
    self._lock = Lock()
    self._started_at = time()
    self._totals: Dict[str, int] = defaultdict(int)
    self._status_buckets: Dict[str, int] = defaultdict(int)
    self._route_totals: Dict[str, int] = defaultdict(int)
    self._error_kinds: Dict[str, int] = defaultdict(int)

  def record(self, route: str, status_code: int) -> None:
    """Record one completed request."""
    status_bucket = f"{status_code // 100}xx"
    with self._lock:
      self._totals["requests_total"] += 1
      if status_code >= 500:
        self._totals["requests_5xx_total"] += 1
      self._status_buckets[status_bucket] += 1
      self._route_totals[route] += 1

  def record_error(self, kind: str) -> None:
    """Count a pipeline failure by error kind."""
    with self._lock:
      self._error_kinds[kind] += 1

  def snapshot(self) -> dict:
    with self._lock:
      return {
        "uptime_seconds": int(time() - self._started_at),
        "requests_total": self._totals.get("requests_total", 0),
        "requests_5xx_total": self._totals.get("requests_5xx_total", 0),
        "status_buckets": dict(self._status_buckets),
        "route_totals": dict(self._route_totals),
        "pipeline_errors": dict(self._error_kinds),
      }
