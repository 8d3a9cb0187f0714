"""Discovery pipeline execution modules."""

from .orchestrator import DiscoveryOrchestrator
from .stages import DiscoveryOutcome, DiscoveryRequest, SearchType

__all__ = ['DiscoveryOrchestrator', 'DiscoveryOutcome', 'DiscoveryRequest', 'SearchType']
