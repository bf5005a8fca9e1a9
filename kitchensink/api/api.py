"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from kitchensink.api.endpoints import admin, auth, contacts

api_router = APIRouter()

# Registration, login, refresh, logout
api_router.include_router(auth.router)

# Owner-scoped contacts (ROLE_USER)
api_router.include_router(contacts.router)

# User and contact administration (ROLE_ADMIN)
api_router.include_router(admin.router)
