import uuid


def new_id() -> str:
    """Opaque, server-assigned primary key."""
    return str(uuid.uuid4())
