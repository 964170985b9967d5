"""SecretSanta - Secret Santa gift exchange coordinator.

Users form groups, an admin closes a group, and every member is drawn a
recipient so that the pairs form one cycle through the whole group.
"""

__version__ = "0.1.0"

from secretsanta.infrastructure.api.app import app

__all__ = ["app", "__version__"]
