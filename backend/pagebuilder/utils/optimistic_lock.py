from flask import request, abort
from datetime import timezone
from dateutil.parser import parse, ParserError


def normalize_ts(ts):
    """
    Ensure datetime is timezone-aware.
    Naive values are stored as UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def enforce_optimistic_lock(entity, header="If-Unmodified-Since"):
    """
    Rejects a write with 412 when the entity changed after the timestamp
    the client sent. HTTP dates only carry whole seconds, so the stored
    timestamp is truncated before comparing.
    """
    client_ts = request.headers.get(header)
    if not client_ts or entity.updated_at is None:
        return  # No optimistic lock requested

    try:
        client_ts = normalize_ts(parse(client_ts))
    except (ParserError, ValueError, OverflowError):
        abort(400, description=f"Invalid {header} header")

    server_ts = normalize_ts(entity.updated_at).replace(microsecond=0)

    if server_ts > client_ts:
        abort(
            412,
            description="Page was modified after the given timestamp."
        )
