import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from playwright.async_api import Page

from storefront_qa.config import Settings
from storefront_qa.flows.sequencer import FlowSequencer
from storefront_qa.reader.page_reader import PageStateReader


@dataclass
class ScenarioContext:
    """Everything a scenario gets to drive one page."""

    page: Page
    settings: Settings
    reader: PageStateReader
    flows: FlowSequencer

    @classmethod
    def for_page(cls, page: Page, settings: Settings) -> "ScenarioContext":
        reader = PageStateReader(page, settings)
        return cls(page=page, settings=settings, reader=reader, flows=FlowSequencer(page, settings, reader=reader))


ScenarioFunc = Callable[[ScenarioContext], Awaitable[None]]


@dataclass
class Scenario:
    name: str
    title: str
    func: ScenarioFunc
    order: int = 0
    tags: List[str] = field(default_factory=list)

    async def run(self, ctx: ScenarioContext) -> None:
        await self.func(ctx)


class ScenarioRegistry:
    def __init__(self):
        self._scenarios: Dict[str, Scenario] = {}

    def __len__(self):
        return len(self._scenarios)

    def __contains__(self, name: str):
        return name in self._scenarios

    def register(self, scenario: Scenario) -> Scenario:
        if scenario.name in self._scenarios:
            raise ValueError(f"Scenario already registered: {scenario.name}")
        self._scenarios[scenario.name] = scenario
        logging.debug(f"Registered scenario {scenario.name}")
        return scenario

    def scenario(self, title: str, name: Optional[str] = None, tags: Optional[List[str]] = None):
        """Decorator registering an async scenario function under its name."""

        def decorator(func: ScenarioFunc) -> ScenarioFunc:
            self.register(
                Scenario(
                    name=name or func.__name__,
                    title=title,
                    func=func,
                    order=len(self._scenarios),
                    tags=list(tags or []),
                )
            )
            return func

        return decorator

    def get(self, name: str) -> Scenario:
        try:
            return self._scenarios[name]
        except KeyError:
            raise KeyError(f"Unknown scenario: {name}. Known: {', '.join(self.names())}") from None

    def names(self) -> List[str]:
        return [s.name for s in self.all()]

    def all(self) -> List[Scenario]:
        return sorted(self._scenarios.values(), key=lambda s: s.order)

    def select(self, names: Optional[Iterable[str]] = None) -> List[Scenario]:
        """Scenarios in registration order, limited to ``names`` when given."""
        if not names:
            return self.all()
        wanted = [self.get(name) for name in names]
        return sorted(wanted, key=lambda s: s.order)
