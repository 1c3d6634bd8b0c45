from __future__ import annotations
"""Finite state machine helper for the task lifecycle.

Usage:
    from domaindesk.utils.fsm import TransitionValidator
    TASK_FSM = TransitionValidator({
        'completed': {'submitted'},
        'submitted': {'approved', 'rejected'},
        'approved': set(),
    })
    TASK_FSM.assert_can_transition(task.status, 'submitted')

Raises a 400 abort if the move is not in the graph. Staying in the same state
is accepted only when the validator is built with allow_same=True.
"""
from typing import Dict, Set, Iterable
from flask import abort


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status', allow_same: bool = False):
        self.graph = graph
        self.field_name = field_name
        self.allow_same = allow_same

    def can_transition(self, current: str, target: str) -> bool:
        if self.allow_same and current == target and current in self.graph:
            return True
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            abort(400, description=f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def targets(self, current: str, among: Iterable[str] = ()) -> list:
        """Reachable states from `current`, optionally limited to `among`, in graph-declared order."""
        allowed = self.graph.get(current, set())
        pool = list(among) or sorted(allowed)
        return [s for s in pool if s in allowed or (self.allow_same and s == current)]

    def is_terminal(self, state: str) -> bool:
        return not self.graph.get(state)

__all__ = ['TransitionValidator']
