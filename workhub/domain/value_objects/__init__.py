"""Domain value objects."""

from workhub.domain.value_objects.core import Attachment, Principal

__all__ = ["Attachment", "Principal"]
