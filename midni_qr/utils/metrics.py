"""
Metrics Collection System

Lightweight metrics for decoder usage and API performance.
Tracks parse outcomes, verification results, request latency and errors.

Author: MiDNI QR Project
Date: October 2026
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional

from midni_qr.config import QR_CONSTANTS


@dataclass
class MetricsSample:
    """Single metrics sample (one parse or one HTTP request)"""
    timestamp: datetime
    kind: str
    latency_ms: float
    outcome: str
    endpoint: Optional[str] = None
    method: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class MetricsStats:
    """Aggregated statistics"""
    total_samples: int = 0
    avg_latency_ms: float = 0.0
    min_latency_ms: float = 0.0
    max_latency_ms: float = 0.0
    error_rate: float = 0.0
    outcomes: Dict[str, int] = field(default_factory=dict)
    status_codes: Dict[int, int] = field(default_factory=dict)


PARSE_OUTCOMES = ("verified", "unverified", "unsigned", "failed")


class MetricsCollector:
    """
    Collects and aggregates metrics for monitoring.

    Thread-safe, in-memory, bounded FIFO of samples plus real-time counters.
    """

    def __init__(self, max_samples: int = QR_CONSTANTS.METRICS_MAX_SAMPLES):
        self.max_samples = max_samples
        self._samples: List[MetricsSample] = []
        self._lock = Lock()
        self._start_time = datetime.now(timezone.utc)
        self._counters = self._empty_counters()

    @staticmethod
    def _empty_counters() -> Dict[str, int]:
        counters = {
            'parses_total': 0,
            'requests_total': 0,
            'requests_failed': 0,
        }
        for outcome in PARSE_OUTCOMES:
            counters[f'parses_{outcome}'] = 0
        return counters

    def _append(self, sample: MetricsSample):
        self._samples.append(sample)
        if len(self._samples) > self.max_samples:
            self._samples.pop(0)

    def record_parse(self, outcome: str, latency_ms: float, error: Optional[str] = None):
        """
        Record one parse.

        Args:
            outcome: One of "verified", "unverified", "unsigned", "failed"
            latency_ms: Parse duration in milliseconds
            error: Error class name when outcome is "failed"
        """
        if outcome not in PARSE_OUTCOMES:
            raise ValueError(f"Unknown parse outcome '{outcome}'. Allowed: {PARSE_OUTCOMES}")

        with self._lock:
            self._append(MetricsSample(
                timestamp=datetime.now(timezone.utc),
                kind='parse',
                latency_ms=latency_ms,
                outcome=outcome,
                error=error,
            ))
            self._counters['parses_total'] += 1
            self._counters[f'parses_{outcome}'] += 1

    def record_request(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        latency_ms: float,
        error: Optional[str] = None,
    ):
        """Record a single API request"""
        with self._lock:
            self._append(MetricsSample(
                timestamp=datetime.now(timezone.utc),
                kind='request',
                latency_ms=latency_ms,
                outcome='ok' if status_code < 400 else 'error',
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                error=error,
            ))
            self._counters['requests_total'] += 1
            if status_code >= 400:
                self._counters['requests_failed'] += 1

    def get_stats(self, kind: Optional[str] = None) -> MetricsStats:
        """
        Get aggregated statistics

        Args:
            kind: "parse" or "request" (None = all samples)
        """
        with self._lock:
            samples = [s for s in self._samples if kind is None or s.kind == kind]

        if not samples:
            return MetricsStats()

        latencies = [s.latency_ms for s in samples]
        failed = len([s for s in samples if s.outcome in ('failed', 'error')])

        outcomes = defaultdict(int)
        status_codes = defaultdict(int)
        for sample in samples:
            outcomes[sample.outcome] += 1
            if sample.status_code is not None:
                status_codes[sample.status_code] += 1

        return MetricsStats(
            total_samples=len(samples),
            avg_latency_ms=sum(latencies) / len(latencies),
            min_latency_ms=min(latencies),
            max_latency_ms=max(latencies),
            error_rate=failed / len(samples) * 100,
            outcomes=dict(outcomes),
            status_codes=dict(status_codes),
        )

    def get_counters(self) -> Dict[str, int]:
        """Get real-time counters"""
        with self._lock:
            return self._counters.copy()

    def get_uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    def reset(self):
        """Reset all metrics (useful for testing)"""
        with self._lock:
            self._samples.clear()
            self._counters = self._empty_counters()
            self._start_time = datetime.now(timezone.utc)

    def export_prometheus_format(self) -> str:
        """
        Export metrics in Prometheus text format

        Returns:
            Prometheus-compatible metrics string
        """
        counters = self.get_counters()
        parse_stats = self.get_stats('parse')

        lines = [
            '# HELP midni_parses_total Total number of payload parses',
            '# TYPE midni_parses_total counter',
        ]
        for outcome in PARSE_OUTCOMES:
            lines.append(f'midni_parses_total{{outcome="{outcome}"}} {counters[f"parses_{outcome}"]}')

        lines.append('# HELP midni_requests_total Total number of API requests')
        lines.append('# TYPE midni_requests_total counter')
        lines.append(f'midni_requests_total {counters["requests_total"]}')

        lines.append('# HELP midni_requests_failed Total number of failed API requests')
        lines.append('# TYPE midni_requests_failed counter')
        lines.append(f'midni_requests_failed {counters["requests_failed"]}')

        lines.append('# HELP midni_parse_latency_avg_ms Average parse latency in milliseconds')
        lines.append('# TYPE midni_parse_latency_avg_ms gauge')
        lines.append(f'midni_parse_latency_avg_ms {parse_stats.avg_latency_ms}')

        lines.append('# HELP midni_uptime_seconds Collector uptime in seconds')
        lines.append('# TYPE midni_uptime_seconds gauge')
        lines.append(f'midni_uptime_seconds {self.get_uptime_seconds()}')

        return '\n'.join(lines) + '\n'


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create global metrics collector"""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def reset_metrics_collector():
    """Reset global metrics collector (for testing)"""
    global _metrics_collector
    if _metrics_collector:
        _metrics_collector.reset()
