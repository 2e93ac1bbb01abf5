from .assessment_store import AssessmentRepository, InMemoryAssessmentStore
from .config import CarescoreConfig, configure_logging, load_config

__all__ = [
    "AssessmentRepository",
    "CarescoreConfig",
    "InMemoryAssessmentStore",
    "configure_logging",
    "load_config",
]
