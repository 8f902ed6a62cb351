"""
Top-level API router.

Aggregates the domain routers under a unified prefix.  The application
factory mounts it at ``/api``.  Only ``/sparplaene`` requires
authentication; ``/auth`` and the info routes are public.
"""

from fastapi import APIRouter

from .endpoints import auth, info, sparplaene

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(sparplaene.router, prefix="/sparplaene", tags=["sparplaene"])
router.include_router(info.router, tags=["info"])
