from fastapi import APIRouter, Depends

from beauty_studio.core.security import get_current_user
from beauty_studio.models.auth import AdminUser, CurrentUserResponse, LoginRequest, LoginResponse
from beauty_studio.services import auth_service

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=LoginResponse)
async def login(req: LoginRequest):
    return auth_service.login(req.email, req.password)


@router.get("/me", response_model=CurrentUserResponse)
async def me(user: AdminUser = Depends(get_current_user)):
    return CurrentUserResponse(user=user)
