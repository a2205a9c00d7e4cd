import logging

from roomtimers.client import projection

logger = logging.getLogger(__name__)


class IntentLayer:
    """User actions against the joined room.

    Only note edits are applied locally before the authority answers; the
    authority's later note_updated wins whatever it says. Run-state, count
    and membership of timers change only when the authority broadcasts.
    """

    def __init__(self, router, store, on_change=None):
        self.router = router
        self.store = store
        self.on_change = on_change

    def create_timer(self) -> bool:
        return self.router.send_intent('create')

    def _timer_action(self, action, timer_id, **fields) -> bool:
        if timer_id not in self.store:
            logger.debug(f"[intent-ignored] action={action} timer={timer_id} reason=unknown-timer")
            return False
        return self.router.send_intent(action, timerId=timer_id, **fields)

    def resume(self, timer_id) -> bool:
        return self._timer_action('resume', timer_id)

    def stop(self, timer_id) -> bool:
        return self._timer_action('stop', timer_id)

    def reset(self, timer_id) -> bool:
        return self._timer_action('reset', timer_id)

    def delete(self, timer_id) -> bool:
        return self._timer_action('delete', timer_id)

    def edit_note(self, timer_id, note) -> bool:
        if not self.router.membership.joined or timer_id not in self.store:
            logger.debug(f"[intent-ignored] action=edit_note timer={timer_id}")
            return False
        note = '' if note is None else str(note)
        if self.store.apply(projection.patch_note, timer_id, note) and self.on_change is not None:
            self.on_change('edit_note')
        return self.router.send_intent('edit_note', timerId=timer_id, note=note)
