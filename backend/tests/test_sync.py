"""Client engine against the in-process authority."""

from roomtimers import socketio
from roomtimers.models import registry
from roomtimers.services.timers.ticker import tick


def test_two_clients_converge(flask_app, connected_client):
    alice, alice_wire = connected_client()
    bob, bob_wire = connected_client()

    alice.join_room('R1')
    bob.join_room('R1')
    alice_wire.pump()
    bob_wire.pump()
    assert alice.timers == {} and bob.timers == {}

    alice.create_timer()
    # Nothing changes locally until the authority broadcasts
    assert alice.timers == {}
    alice_wire.pump()
    bob_wire.pump()
    assert alice.timers == bob.timers
    (timer_id,) = alice.timers

    bob.resume(timer_id)
    alice_wire.pump()
    bob_wire.pump()
    assert alice.timers[timer_id]['isRunning'] is True

    tick(flask_app, socketio, 4.0)
    alice_wire.pump()
    bob_wire.pump()
    assert alice.timers[timer_id] == {'count': 4.0, 'isRunning': True, 'note': ''}
    assert bob.timers == alice.timers


def test_concurrent_note_edits_settle_on_last_write(connected_client):
    alice, alice_wire = connected_client()
    bob, bob_wire = connected_client()
    alice.join_room('R1')
    bob.join_room('R1')
    alice.create_timer()
    alice_wire.pump()
    bob_wire.pump()
    (timer_id,) = alice.timers

    alice.edit_note(timer_id, 'alice')
    bob.edit_note(timer_id, 'bob')
    assert alice.timers[timer_id]['note'] == 'alice'
    assert bob.timers[timer_id]['note'] == 'bob'

    alice_wire.pump()
    bob_wire.pump()
    assert alice.timers[timer_id]['note'] == 'bob'
    assert bob.timers[timer_id]['note'] == 'bob'
    assert registry.room_snapshot('R1')['timers'][0]['note'] == 'bob'


def test_late_join_receives_existing_state(connected_client):
    alice, alice_wire = connected_client()
    alice.join_room('R1')
    alice.create_timer()
    alice_wire.pump()
    (timer_id,) = alice.timers
    alice.edit_note(timer_id, 'rice')
    alice.resume(timer_id)

    carol, carol_wire = connected_client()
    carol.join_room('R1')
    carol_wire.pump()
    assert carol.timers == {timer_id: {'count': 0.0, 'isRunning': True, 'note': 'rice'}}


def test_delete_and_leave(connected_client):
    alice, alice_wire = connected_client()
    bob, bob_wire = connected_client()
    alice.join_room('R1')
    bob.join_room('R1')
    alice.create_timer()
    alice.create_timer()
    alice_wire.pump()
    bob_wire.pump()
    first, second = sorted(bob.timers)

    alice.delete(first)
    bob.leave_room()
    alice_wire.pump()
    bob_wire.pump()
    assert list(alice.timers) == [second]
    assert bob.timers == {}
    assert bob.room_id is None


def test_switching_rooms_before_snapshot_shows_only_new_room(connected_client, make_sio_client):
    # R1 already holds a timer
    other = make_sio_client()
    other.emit('join_room', 'R1')
    other.emit('create_timer', {'roomId': 'R1'})

    alice, alice_wire = connected_client()
    seen = []
    alice.subscribe(lambda reason, timers: seen.append(timers))
    alice.join_room('R1')
    alice.leave_room()
    alice.join_room('R2')
    alice_wire.pump()
    assert alice.room_id == 'R2'
    assert alice.timers == {}
    # R1's late snapshot never reached the projection
    assert all(timers == {} for timers in seen)
