"""
Electro Admin Module

User role administration. All endpoints require the admin claim.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from electro.deps import require_admin, require_role_admin
from electro.modules.admin.service import RoleAdminService, RoleAssignment

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[require_role_admin, require_admin])


class RolesRequest(BaseModel):
    roles: list[str] = Field(default_factory=list)


class RoleRequest(BaseModel):
    role: str = Field(..., min_length=1)


def get_service() -> RoleAdminService:
    return RoleAdminService()


@router.put("/users/{user_id}/roles", response_model=RoleAssignment)
async def set_user_roles(user_id: str, request: RolesRequest, service: RoleAdminService = Depends(get_service)):
    """Replace the user's roles."""
    return await service.set_roles(user_id, request.roles)


@router.post("/users/{user_id}/roles", response_model=RoleAssignment)
async def add_user_role(user_id: str, request: RoleRequest, service: RoleAdminService = Depends(get_service)):
    return await service.add_role(user_id, request.role)


@router.delete("/users/{user_id}/roles/{role}", response_model=RoleAssignment)
async def remove_user_role(user_id: str, role: str, service: RoleAdminService = Depends(get_service)):
    return await service.remove_role(user_id, role)
