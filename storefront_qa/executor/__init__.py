from .result_aggregator import ResultAggregator
from .scenario_executor import ScenarioExecutor

__all__ = ["ScenarioExecutor", "ResultAggregator"]
