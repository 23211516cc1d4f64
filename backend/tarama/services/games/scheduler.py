from tarama import socketio

_started_apps = set()


def start_room_sweeper(app, session) -> bool:
    """Start the periodic room reclamation task for ``app``.

    - No-ops in TESTING mode (tests call ``session.reclaim_rooms`` directly)
    - Ensures a single sweeper per app
    - Every ROOM_SWEEP_INTERVAL_SEC, deletes rooms that sat empty past the
      idle grace period and rooms older than the maximum lifetime
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False
    if id(app) in _started_apps:
        app.logger.info("[sweep-skip] sweeper already running")
        return False
    _started_apps.add(id(app))

    interval = int(app.config.get('ROOM_SWEEP_INTERVAL_SEC', 600))
    app.logger.info(
        f"[sweep-set] interval={interval}s idle_grace={session.registry.idle_grace_sec}s "
        f"max_lifetime={session.registry.max_lifetime_sec}s"
    )

    def _sleep(delay: int) -> None:
        # heartbeat sleep loop if enabled
        hb = int(app.config.get('SWEEP_HEARTBEAT_SEC', 0) or 0)
        if hb <= 0:
            socketio.sleep(delay)
            return
        slept = 0
        while slept < delay:
            step = min(hb, delay - slept)
            socketio.sleep(step)
            slept += step
            app.logger.info(f"[sweep-heartbeat] rooms={len(session.registry)} next_in={max(0, delay - slept)}s")

    def _worker():
        while True:
            _sleep(interval)
            try:
                with app.app_context():
                    removed = session.reclaim_rooms()
                app.logger.info(f"[sweep] removed={len(removed)} remaining={len(session.registry)}")
            except Exception:
                app.logger.exception("[sweep-error] room sweep failed")

    socketio.start_background_task(_worker)
    return True
