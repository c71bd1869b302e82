"""
Session registry: one ProgressionEngine per authoring session.

Sessions never share state. The HTTP app keeps a single registry on app.state.
"""

from typing import Dict, Iterator, Optional, Union

from coach.errors import UnknownSessionError
from coach.progression.catalog import DEFAULT_CATALOG, CurriculumCatalog
from coach.progression.engine import ProgressionEngine
from coach.progression.schemas import CeilingConfig, Interaction, RoutingResult, SessionSnapshot


class SessionRegistry:
    def __init__(self, ceilings: Optional[CeilingConfig] = None, catalog: CurriculumCatalog = DEFAULT_CATALOG):
        self.ceilings = ceilings or CeilingConfig()
        self.ceilings.validate_ceilings()
        self.catalog = catalog
        self._engines: Dict[str, ProgressionEngine] = {}

    def create(self, audience_descriptor: str = "", session_id: Optional[str] = None) -> ProgressionEngine:
        engine = ProgressionEngine(
            audience_descriptor=audience_descriptor,
            ceilings=self.ceilings.model_copy(),
            session_id=session_id,
            catalog=self.catalog,
        )
        self._engines[engine.session_id] = engine
        print(f"🆕 Session {engine.session_id} ({engine.profile.abstraction_tier.value})")
        return engine

    def get(self, session_id: str) -> ProgressionEngine:
        try:
            return self._engines[session_id]
        except KeyError:
            raise UnknownSessionError(session_id) from None

    def find(self, session_id: str) -> Optional[ProgressionEngine]:
        return self._engines.get(session_id)

    def restore(self, snapshot: SessionSnapshot) -> ProgressionEngine:
        engine = ProgressionEngine.from_snapshot(snapshot, self.catalog)
        self._engines[engine.session_id] = engine
        return engine

    def route_interaction(
        self, session_id: str, step_id: str, interaction: Union[Interaction, dict]
    ) -> RoutingResult:
        return self.get(session_id).route_interaction(step_id, interaction)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._engines

    def __iter__(self) -> Iterator[str]:
        return iter(self._engines)

    def __len__(self) -> int:
        return len(self._engines)
