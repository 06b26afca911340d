"""Analysis engine and result cache seams."""

from hush.engine.protocols import AnalysisEngine, ResultCache
from hush.engine.replay import ReplayEngine, read_results_async

__all__ = ["AnalysisEngine", "ResultCache", "ReplayEngine", "read_results_async"]
