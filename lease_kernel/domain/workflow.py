"""
Canonical workflow types (``lease_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for state machines.  The lease lifecycle is declared
once as a ``Workflow`` so that the graph, the acting roles and the
terminal states live in one place.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``services/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the lease rules do.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``actor`` names the role allowed to fire it (landlord, tenant,
    arbiter, ...).  Self-loops (``from_state == to_state``) are legal.
    """
    from_state: str
    to_state: str
    action: str
    actor: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    Contract: frozen; validated at construction.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Initial state {self.initial_state!r} not in workflow {self.name}"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Transition {t.action!r} references an unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Terminal state {t.from_state!r} has outgoing transition {t.action!r}"
                )

    def allows(self, from_state: str, to_state: str) -> bool:
        """True if some transition moves ``from_state`` to ``to_state``."""
        return any(
            t.from_state == from_state and t.to_state == to_state
            for t in self.transitions
        )

    def transitions_for(self, action: str) -> tuple[Transition, ...]:
        """All transitions fired by ``action``."""
        return tuple(t for t in self.transitions if t.action == action)

    def successors(self, state: str) -> frozenset[str]:
        """States reachable from ``state`` in one step."""
        return frozenset(
            t.to_state for t in self.transitions if t.from_state == state
        )
