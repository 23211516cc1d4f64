def score_capture(room, player: int, score_delta: int, disabled_points, source: str) -> None:
    """Apply a capture to the room's score pair and record it.

    Only opponent stones score; the caller passes the already computed delta.
    ``source`` is 'enclosure' for a drawn loop or 'surround' for an automatic
    capture on a placed stone.
    """
    room.scores[player] += score_delta
    room.capture_history.append({
        'player': player,
        'source': source,
        'scoreDelta': score_delta,
        'disabledCount': len(disabled_points),
        'scoresAfter': list(room.scores),
    })
