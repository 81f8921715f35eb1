"""
Prometheus metrics configuration
"""
import os

from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Gauge, Histogram,
                               Info, generate_latest)
from prometheus_client.multiprocess import MultiProcessCollector
from prometheus_client.registry import REGISTRY

from depin.core.config import get_settings

if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
    REGISTRY = MultiProcessCollector(REGISTRY)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

# ============================================================================
# Ledger Metrics
# ============================================================================

devices_registered_total = Counter(
    'ledger_devices_registered_total',
    'Total number of registered devices',
    ['device_type']
)

submissions_total = Counter(
    'ledger_submissions_total',
    'Total number of committed telemetry submissions',
    ['outcome']  # rewarded | unrewarded
)

rewards_distributed_total = Counter(
    'ledger_rewards_distributed_total',
    'Total reward units transferred to device owners'
)

reward_amount = Histogram(
    'ledger_reward_amount',
    'Reward units per rewarded submission',
    buckets=(10, 50, 100, 250, 500, 1000, 1500, 2000, 3000, 4000, 5000)
)

transfer_duration_seconds = Histogram(
    'ledger_transfer_duration_seconds',
    'Duration of reward transfer calls in seconds',
    ['status'],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0)
)

operations_rejected_total = Counter(
    'ledger_operations_rejected_total',
    'Total number of rejected ledger operations',
    ['operation', 'code']
)

network_active = Gauge(
    'ledger_network_active',
    'Whether the network accepts activity (1 active, 0 paused)'
)

# ============================================================================
# Application Info
# ============================================================================

app_info = Info(
    'app_info',
    'Application information'
)

_settings = get_settings()
app_info.info({
    'app_name': _settings.app_name,
    'app_env': _settings.app_env,
    'version': '0.1.0'
})


def get_metrics():
    """
    Get Prometheus metrics in text format

    Returns:
        bytes: Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_metrics_content_type():
    """Get content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST
