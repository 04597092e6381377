from datetime import datetime, timezone


def utcnow() -> str:
    # Microseconds keep insertion order stable for rows created in the same request.
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
