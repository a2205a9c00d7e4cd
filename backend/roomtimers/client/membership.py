import logging
from typing import Optional

logger = logging.getLogger(__name__)

JOIN_EVENT = 'join_room'
LEAVE_EVENT = 'leave_room'


class RoomMembership:
    """Single-room membership: NotJoined (room_id is None) or Joined(room_id).

    Guard failures send nothing, change nothing and return False.
    """

    def __init__(self, session, store):
        self.session = session
        self.store = store
        self.room_id: Optional[str] = None
        # join_room sends the authority has not answered with a snapshot yet
        self._pending_joins = 0

    @property
    def joined(self) -> bool:
        return self.room_id is not None

    def is_current(self, room_id) -> bool:
        return self.joined and str(room_id) == self.room_id

    def join(self, room_id) -> bool:
        if self.joined:
            logger.debug(f"[join-ignored] room={room_id} current={self.room_id}")
            return False
        if room_id is None or str(room_id) == '':
            logger.debug("[join-ignored] empty room id")
            return False
        room_id = str(room_id)
        # Projection stays empty until the authority's snapshot arrives
        self.store.clear()
        self.room_id = room_id
        if self.session.send(JOIN_EVENT, room_id):
            self._pending_joins += 1
        logger.info(f"[join] room={room_id}")
        return True

    def leave(self) -> bool:
        if not self.joined:
            logger.debug("[leave-ignored] not joined")
            return False
        room_id = self.room_id
        self.session.send(LEAVE_EVENT, room_id)
        self.room_id = None
        self.store.clear()
        logger.info(f"[leave] room={room_id}")
        return True

    def rejoin(self) -> bool:
        """Ask the authority for a fresh snapshot of the current room."""
        # Answers to joins sent on the previous connection are lost
        self._pending_joins = 0
        if not self.joined:
            return False
        if self.session.send(JOIN_EVENT, self.room_id):
            self._pending_joins = 1
        logger.info(f"[rejoin] room={self.room_id}")
        return True

    def answer_snapshot(self) -> bool:
        """Account for one inbound snapshot; True when it answers the latest join.

        Snapshots answering an earlier join (for a room since left) are stale.
        """
        if self._pending_joins == 0:
            return True
        self._pending_joins -= 1
        return self._pending_joins == 0
