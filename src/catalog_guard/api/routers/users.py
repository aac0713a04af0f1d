"""
catalog_guard.api.routers.users

User administration endpoints.

Responsibilities:
- Register users in the directory and list them with their grants.
- Claim management: offered claim types, attach, detach-by-type.
- Gate every route behind the `AdministratorsOnly` policy.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from catalog_guard.api.deps import Services, db_session, raise_for_outcome, services
from catalog_guard.auth.deps import require_policy
from catalog_guard.auth.models import Principal
from catalog_guard.db.repositories.users import UserRepo

router = APIRouter(
    prefix="/v1/users",
    tags=["users"],
    dependencies=[Depends(require_policy("AdministratorsOnly"))],
)


class UserIn(BaseModel):
    user_name: str = Field(min_length=1, max_length=256)
    email: str = Field(default="", max_length=256)
    id_card_no: str | None = Field(default=None, min_length=15, max_length=18)
    birth_date: date | None = None


class ClaimOut(BaseModel):
    type: str
    value: str


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    roles: list[str]
    claims: list[ClaimOut]

    @classmethod
    def of(cls, principal: Principal) -> UserOut:
        return cls(
            id=principal.id,
            name=principal.name,
            email=principal.email,
            roles=sorted(principal.role_names),
            claims=[ClaimOut(type=c.type, value=c.value) for c in principal.claims],
        )


class ClaimIn(BaseModel):
    claim_type: str = Field(min_length=1, max_length=256)
    claim_value: str = Field(default="", max_length=256)


@router.get("", response_model=list[UserOut])
async def list_users(svc: Services = Depends(services)) -> list[UserOut]:
    return [UserOut.of(p) for p in await svc.directory.list_principals()]


@router.post("", response_model=UserOut, status_code=HTTP_201_CREATED)
async def create_user(
    body: UserIn,
    session: AsyncSession = Depends(db_session),
    svc: Services = Depends(services),
) -> UserOut:
    try:
        user = await UserRepo(session).create(
            user_name=body.user_name,
            email=body.email,
            id_card_no=body.id_card_no,
            birth_date=body.birth_date,
        )
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="User name is taken") from e
    principal = await svc.directory.find_principal(user.id)
    if principal is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.of(principal)


@router.get("/{principal_id}", response_model=UserOut)
async def get_user(principal_id: str, svc: Services = Depends(services)) -> UserOut:
    principal = await svc.directory.find_principal(principal_id)
    if principal is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.of(principal)


@router.get("/{principal_id}/claims/available", response_model=list[str])
async def available_claim_types(principal_id: str, svc: Services = Depends(services)) -> list[str]:
    available = await svc.reconciler.available_claim_types(principal_id)
    if available is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return available


@router.post("/{principal_id}/claims", status_code=HTTP_204_NO_CONTENT)
async def attach_claim(
    principal_id: str, body: ClaimIn, svc: Services = Depends(services)
) -> Response:
    raise_for_outcome(
        await svc.reconciler.attach_claim(principal_id, body.claim_type, body.claim_value)
    )
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.delete("/{principal_id}/claims/{claim_type}", status_code=HTTP_204_NO_CONTENT)
async def detach_claim(principal_id: str, claim_type: str, svc: Services = Depends(services)) -> Response:
    raise_for_outcome(await svc.reconciler.detach_claim(principal_id, claim_type))
    return Response(status_code=HTTP_204_NO_CONTENT)
