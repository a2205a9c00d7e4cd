import time
from typing import List, Tuple

from roomtimers.models import registry
from roomtimers.socketio_events import room_channel


_ticker_started = False


def tick(app, socketio, elapsed: float) -> List[Tuple[str, dict]]:
    """Advance running timers by `elapsed` seconds and broadcast new counts."""
    namespace = app.config.get('SOCKETIO_NAMESPACE', '/')
    advanced = registry.advance_running(elapsed)
    for room_id, timer in advanced:
        socketio.emit(
            'timer_update',
            {'roomId': room_id, 'timerId': timer['timerId'], 'count': timer['count']},
            to=room_channel(room_id),
            namespace=namespace,
        )
    return advanced


def start_ticker(app, socketio) -> bool:
    """Start the background tick loop once per process.

    - No-ops in TESTING mode unless ENABLE_TICKER_IN_TESTS is set
    - Uses measured wall time between ticks, so a late tick catches up
    """
    global _ticker_started
    if app.config.get('TESTING') and not app.config.get('ENABLE_TICKER_IN_TESTS'):
        return False
    if _ticker_started:
        return False
    _ticker_started = True

    interval = float(app.config.get('TICK_INTERVAL_SEC', 0.1))
    app.logger.info(f"[ticker-start] interval={interval}s")

    def _worker():
        last = time.monotonic()
        while True:
            socketio.sleep(interval)
            now = time.monotonic()
            elapsed, last = now - last, now
            try:
                tick(app, socketio, elapsed)
            except Exception:
                app.logger.exception("[ticker-error] tick failed")

    socketio.start_background_task(_worker)
    return True
