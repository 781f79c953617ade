"""
Digest orchestration module.

This module wires the digest pipeline together: routing webhook events,
starting summarize runs and scheduling their batches.
"""

from .batch_scheduler import BatchScheduler, error_notice, partition
from .handlers import WebhookEventHandler
from .summarize_orchestrator import SummarizeOrchestrator

__all__ = [
    "BatchScheduler",
    "SummarizeOrchestrator",
    "WebhookEventHandler",
    "error_notice",
    "partition",
]
