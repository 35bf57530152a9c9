"""
Game Config - Declarative description of a game's moves, phases and hooks.

A GameConfig is authored once per game and never changes while the
game runs. It provides:
- Global moves (allowed in every phase)
- An ordered list of phase declarations with per-phase moves and hooks
- Optional turn hooks (on_begin / on_end)
- An optional setup function producing the initial state

Phases are kept as an ordered tuple, so "first declared phase" is
well defined without relying on mapping iteration order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.state import ActionContext, SetupContext


# (state, payload, context) -> new state
ReducerFn = Callable[[Any, "dict[str, Any]", "ActionContext"], Any]
SetupFn = Callable[["SetupContext"], Any]

# Author-facing aliases accepted by from_dict()
_KEY_ALIASES = {
    "onBegin": "on_begin",
    "onEnd": "on_end",
}


@dataclass(frozen=True)
class TurnHooks:
    """Reducers run around every turn advance."""
    on_begin: ReducerFn | None = None
    on_end: ReducerFn | None = None

    @property
    def is_empty(self) -> bool:
        return self.on_begin is None and self.on_end is None


@dataclass(frozen=True)
class PhaseDefinition:
    """
    One named step in the game flow.

    `next` points at the phase that follows when the board ends this
    phase without an explicit target.
    """
    name: str
    start: bool = False
    on_begin: ReducerFn | None = None
    on_end: ReducerFn | None = None
    moves: Mapping[str, ReducerFn] = field(default_factory=dict)
    next: str | None = None

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> PhaseDefinition:
        """Build a phase from a plain mapping (camelCase hook keys allowed)."""
        values = {_KEY_ALIASES.get(k, k): v for k, v in data.items()}
        return cls(
            name=name,
            start=values.get("start") is True,
            on_begin=values.get("on_begin"),
            on_end=values.get("on_end"),
            moves=dict(values.get("moves") or {}),
            next=values.get("next") or None,
        )


@dataclass(frozen=True)
class GameConfig:
    """
    Complete configuration for one game.

    Phase lookups return the first declaration with a given name;
    duplicate names are reported by validate_config().
    """
    moves: Mapping[str, ReducerFn] = field(default_factory=dict)
    phases: tuple[PhaseDefinition, ...] = ()
    turns: TurnHooks | None = None
    setup: SetupFn | None = None
    name: str = ""

    _phase_index: dict[str, PhaseDefinition] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self):
        phases = tuple(self.phases)
        object.__setattr__(self, "phases", phases)
        index: dict[str, PhaseDefinition] = {}
        for phase in phases:
            index.setdefault(phase.name, phase)
        object.__setattr__(self, "_phase_index", index)

    @property
    def phase_names(self) -> list[str]:
        return [p.name for p in self.phases]

    def get_phase(self, name: str) -> PhaseDefinition | None:
        return self._phase_index.get(name)

    def has_phase(self, name: str) -> bool:
        return name in self._phase_index

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameConfig:
        """
        Build a config from a plain mapping.

        `phases` may be a list of PhaseDefinition / mappings with a "name"
        key, or a mapping of name -> definition (declaration order kept).
        """
        raw_phases = data.get("phases") or []
        phases: list[PhaseDefinition] = []
        if isinstance(raw_phases, Mapping):
            for name, definition in raw_phases.items():
                phases.append(_coerce_phase(name, definition))
        else:
            for definition in raw_phases:
                if isinstance(definition, PhaseDefinition):
                    phases.append(definition)
                else:
                    phases.append(_coerce_phase(definition["name"], definition))

        turns = data.get("turns")
        if isinstance(turns, Mapping):
            values = {_KEY_ALIASES.get(k, k): v for k, v in turns.items()}
            turns = TurnHooks(on_begin=values.get("on_begin"), on_end=values.get("on_end"))

        return cls(
            moves=dict(data.get("moves") or {}),
            phases=tuple(phases),
            turns=turns,
            setup=data.get("setup"),
            name=data.get("name", ""),
        )


def _coerce_phase(name: str, definition: Any) -> PhaseDefinition:
    if isinstance(definition, PhaseDefinition):
        if definition.name != name:
            raise ValueError(
                f"Phase declared as '{name}' is named '{definition.name}'"
            )
        return definition
    return PhaseDefinition.from_dict(name, definition or {})
