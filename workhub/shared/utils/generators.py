"""ID generators (CUID2 primary keys, storage keys)."""

import uuid

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_attachment_key(original_name: str) -> str:
    """Return the storage key for a newly uploaded task attachment."""
    safe_name = original_name.replace("/", "_").replace("\\", "_")
    return f"tasks/attachments/{uuid.uuid4()}-{safe_name}"
