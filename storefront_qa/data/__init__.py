from .test_structures import FailureDiagnostics, RunSession, ScenarioResult, TestStatus

__all__ = ["TestStatus", "FailureDiagnostics", "ScenarioResult", "RunSession"]
