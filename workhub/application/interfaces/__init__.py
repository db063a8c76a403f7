"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from workhub.infrastructure or workhub.api.
"""

from workhub.application.interfaces.repositories import (
    IMembershipResolver,
    INotificationRepository,
    IPrincipalDirectory,
    ITaskRepository,
)
from workhub.application.interfaces.services import (
    IAttachmentStorage,
    IBacklogProvider,
    IDeliveryChannel,
    IDeliveryQueue,
)

__all__ = [
    "IAttachmentStorage",
    "IBacklogProvider",
    "IDeliveryChannel",
    "IDeliveryQueue",
    "IMembershipResolver",
    "INotificationRepository",
    "IPrincipalDirectory",
    "ITaskRepository",
]
