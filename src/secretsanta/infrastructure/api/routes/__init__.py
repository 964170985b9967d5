"""API Routes for SecretSanta."""

from secretsanta.infrastructure.api.routes.groups_router import router as groups_router
from secretsanta.infrastructure.api.routes.users_router import router as users_router

__all__ = [
    "groups_router",
    "users_router",
]
