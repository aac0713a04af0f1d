"""
catalog_guard.api.routers.roles

Role administration endpoints.

Responsibilities:
- Role lifecycle (create, rename, delete) and a name availability probe.
- Membership views (members, candidates) and membership edits.
- Gate every route behind the `AdministratorsOnly` policy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from catalog_guard.api.deps import Services, raise_for_outcome, services
from catalog_guard.auth.deps import require_policy
from catalog_guard.auth.models import Principal, Role

router = APIRouter(
    prefix="/v1/roles",
    tags=["roles"],
    dependencies=[Depends(require_policy("AdministratorsOnly"))],
)


class RoleOut(BaseModel):
    id: str
    name: str

    @classmethod
    def of(cls, role: Role) -> RoleOut:
        return cls(id=role.id, name=role.name)


class RoleNameIn(BaseModel):
    name: str = Field(max_length=256)


class RoleExistsOut(BaseModel):
    name: str
    exists: bool


class MemberOut(BaseModel):
    id: str
    name: str
    email: str

    @classmethod
    def of(cls, principal: Principal) -> MemberOut:
        return cls(id=principal.id, name=principal.name, email=principal.email)


@router.get("", response_model=list[RoleOut])
async def list_roles(svc: Services = Depends(services)) -> list[RoleOut]:
    return [RoleOut.of(r) for r in await svc.reconciler.list_roles()]


@router.post("", status_code=HTTP_201_CREATED, response_model=RoleExistsOut)
async def add_role(body: RoleNameIn, svc: Services = Depends(services)) -> RoleExistsOut:
    raise_for_outcome(await svc.reconciler.add_role(body.name))
    return RoleExistsOut(name=body.name, exists=True)


@router.get("/exists", response_model=RoleExistsOut)
async def role_exists(
    name: str = Query(min_length=1), svc: Services = Depends(services)
) -> RoleExistsOut:
    return RoleExistsOut(name=name, exists=await svc.reconciler.role_exists(name))


@router.patch("/{role_id}", status_code=HTTP_204_NO_CONTENT)
async def rename_role(
    role_id: str, body: RoleNameIn, svc: Services = Depends(services)
) -> Response:
    raise_for_outcome(await svc.reconciler.rename_role(role_id, body.name))
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.delete("/{role_id}", status_code=HTTP_204_NO_CONTENT)
async def remove_role(role_id: str, svc: Services = Depends(services)) -> Response:
    raise_for_outcome(await svc.reconciler.remove_role(role_id))
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.get("/{role_id}/members", response_model=list[MemberOut])
async def role_members(role_id: str, svc: Services = Depends(services)) -> list[MemberOut]:
    return [MemberOut.of(p) for p in await svc.reconciler.role_members(role_id)]


@router.get("/{role_id}/candidates", response_model=list[MemberOut])
async def membership_candidates(role_id: str, svc: Services = Depends(services)) -> list[MemberOut]:
    return [MemberOut.of(p) for p in await svc.reconciler.membership_candidates(role_id)]


@router.put("/{role_id}/members/{principal_id}", status_code=HTTP_204_NO_CONTENT)
async def add_member(role_id: str, principal_id: str, svc: Services = Depends(services)) -> Response:
    raise_for_outcome(await svc.reconciler.set_role_membership(principal_id, role_id, True))
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.delete("/{role_id}/members/{principal_id}", status_code=HTTP_204_NO_CONTENT)
async def remove_member(
    role_id: str, principal_id: str, svc: Services = Depends(services)
) -> Response:
    raise_for_outcome(await svc.reconciler.set_role_membership(principal_id, role_id, False))
    return Response(status_code=HTTP_204_NO_CONTENT)


# --- Module Notes -----------------------------------------------------------
# PUT on a membership is idempotent; DELETE of a membership that does not exist is a 409
# (NotAMember) rather than a silent no-op.
