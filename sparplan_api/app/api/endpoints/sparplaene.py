"""
Savings plan endpoints.

Every route requires a bearer token; anonymous requests get 401 from
``require_identity``.  Callers only ever see their own plans.  Accessing
another user's plan answers 403, an unknown id answers 404; the
decision is made by ``SparplanService.resolve_owned``.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Response, status

from sparplan_api.app.api.deps import get_sparplan_service
from sparplan_api.app.core.db import SQLITE_MAX_INTEGER
from sparplan_api.app.core.middleware import Identity, require_identity
from sparplan_api.app.schemas.sparplan import SparplanRead, SparplanWrite
from sparplan_api.app.services.sparplan_service import SparplanService

router = APIRouter()

# Ids outside the storable range are rejected as invalid input
PlanId = Annotated[int, Path(ge=1, le=SQLITE_MAX_INTEGER)]


@router.get("", response_model=List[SparplanRead])
async def list_sparplaene(
    identity: Identity = Depends(require_identity),
    plans: SparplanService = Depends(get_sparplan_service),
) -> List[SparplanRead]:
    """Return the caller's savings plans."""
    return await plans.list_for_owner(identity.user_id)


@router.get("/{plan_id}", response_model=SparplanRead)
async def get_sparplan(
    plan_id: PlanId,
    identity: Identity = Depends(require_identity),
    plans: SparplanService = Depends(get_sparplan_service),
) -> SparplanRead:
    return await plans.get_owned(plan_id, identity.user_id)


@router.post("", response_model=SparplanRead, status_code=status.HTTP_201_CREATED)
async def create_sparplan(
    body: SparplanWrite,
    identity: Identity = Depends(require_identity),
    plans: SparplanService = Depends(get_sparplan_service),
) -> SparplanRead:
    """Create a plan owned by the caller."""
    return await plans.create(body, identity.user_id)


@router.put("/{plan_id}", response_model=SparplanRead)
async def update_sparplan(
    plan_id: PlanId,
    body: SparplanWrite,
    identity: Identity = Depends(require_identity),
    plans: SparplanService = Depends(get_sparplan_service),
) -> SparplanRead:
    """Replace ETF name, monthly amount and term of an owned plan."""
    return await plans.update(plan_id, body, identity.user_id)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sparplan(
    plan_id: PlanId,
    identity: Identity = Depends(require_identity),
    plans: SparplanService = Depends(get_sparplan_service),
) -> Response:
    if not await plans.delete_owned(plan_id, identity.user_id):
        raise await plans.denial_for(plan_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
