"""Configuration model exports.

    from attune.config.models import ReconcilerConfig, StorageConfig
"""

from attune.config.models.api import APIConfig
from attune.config.models.notifications import NotificationsConfig
from attune.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from attune.config.models.reconciler import (
    GapAnalysisConfig,
    ReconcilerConfig,
    ShareDraftConfig,
    SummaryConfig,
)
from attune.config.models.storage import StorageConfig

__all__ = [
    "APIConfig",
    "GapAnalysisConfig",
    "LoggingConfig",
    "MetricsConfig",
    "NotificationsConfig",
    "ObservabilityConfig",
    "ReconcilerConfig",
    "StorageConfig",
    "ShareDraftConfig",
    "SummaryConfig",
    "TracingConfig",
]
