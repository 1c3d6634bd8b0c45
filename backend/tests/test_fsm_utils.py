import pytest
from werkzeug.exceptions import BadRequest
from domaindesk.utils.fsm import TransitionValidator
from domaindesk.services.tasks import TASK_FSM, PROGRESS_FSM
from domaindesk.models.task import Task


def test_basic_transitions():
    fsm = TransitionValidator({'A': {'B'}, 'B': {'C'}, 'C': set()})
    assert fsm.can_transition('A', 'B')
    assert not fsm.can_transition('A', 'C')
    assert not fsm.can_transition('A', 'A')
    assert fsm.is_terminal('C')
    with pytest.raises(BadRequest):
        fsm.assert_can_transition('B', 'A')


def test_allow_same_only_for_known_states():
    fsm = TransitionValidator({'A': {'B'}}, allow_same=True)
    assert fsm.can_transition('A', 'A')
    assert not fsm.can_transition('Z', 'Z')


def test_targets_respects_order():
    assert PROGRESS_FSM.targets('working', Task.STAFF_STATUSES) == ['not_started', 'working', 'completed']
    assert TASK_FSM.targets('submitted') == ['approved', 'rejected']
    assert TASK_FSM.targets('approved') == []


@pytest.mark.parametrize('src,dst', [
    ('not_started', 'working'), ('not_started', 'completed'),
    ('working', 'not_started'), ('working', 'completed'),
    ('completed', 'not_started'), ('completed', 'working'), ('completed', 'submitted'),
    ('submitted', 'approved'), ('submitted', 'rejected'),
    ('rejected', 'not_started'), ('rejected', 'working'), ('rejected', 'completed'),
])
def test_task_graph_allows(src, dst):
    assert TASK_FSM.can_transition(src, dst)


@pytest.mark.parametrize('src,dst', [
    ('not_started', 'submitted'), ('working', 'submitted'), ('rejected', 'submitted'),
    ('submitted', 'working'), ('approved', 'rejected'), ('approved', 'working'),
    ('not_started', 'approved'),
])
def test_task_graph_forbids(src, dst):
    assert not TASK_FSM.can_transition(src, dst)


def test_error_message_names_field():
    with pytest.raises(BadRequest) as exc:
        TASK_FSM.assert_can_transition('approved', 'working')
    assert 'status transition approved -> working' in exc.value.description


def test_every_status_is_in_graph():
    assert set(TASK_FSM.graph) == set(Task.ALL_STATUSES)
    assert TASK_FSM.is_terminal(Task.STATUS_APPROVED)


def test_staff_picker_options():
    from domaindesk.services.tasks import staff_status_options
    assert staff_status_options('working') == ['not_started', 'working', 'completed']
    # rejected is not a picker value; the page adds a keep-current entry for it
    assert staff_status_options('rejected') == ['not_started', 'working', 'completed']
    assert staff_status_options('submitted') == []
