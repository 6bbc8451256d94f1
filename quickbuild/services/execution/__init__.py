"""Run stages: service probing, supervised execution and output analysis."""

from .output_analyzer import EVIDENCE_PATTERNS, OutputAnalyzer
from .probes import ServiceProber, parse_address, probe_endpoint
from .signal_handler import ProcessSignalHandler
from .supervisor import RunSupervisor, classify_exit

__all__ = [
    "EVIDENCE_PATTERNS",
    "OutputAnalyzer",
    "ProcessSignalHandler",
    "RunSupervisor",
    "ServiceProber",
    "classify_exit",
    "parse_address",
    "probe_endpoint",
]
