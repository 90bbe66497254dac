from django.conf import settings


def sync_tolerance() -> float:
    return float(getattr(settings, "SYNC_TOLERANCE_SECONDS", 1.5))


def drift(local_position: float, authoritative_position: float) -> float:
    return abs(local_position - authoritative_position)


def needs_resync(local_position, authoritative_position, tolerance=None) -> bool:
    """
    True when a client should seek to the authoritative position.

    Drift within the tolerance is left alone so network latency does not
    cause visible jitter.
    """
    if tolerance is None:
        tolerance = sync_tolerance()
    return drift(local_position, authoritative_position) > tolerance


def reconcile(local_position, snapshot, tolerance=None):
    """Return the position to seek to, or None to keep playing as is."""
    target = snapshot["currentTime"]
    if needs_resync(local_position, target, tolerance):
        return target
    return None
