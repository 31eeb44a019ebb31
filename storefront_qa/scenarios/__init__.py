from .registry import Scenario, ScenarioContext, ScenarioRegistry
from .shop import registry

__all__ = ["Scenario", "ScenarioContext", "ScenarioRegistry", "registry"]
