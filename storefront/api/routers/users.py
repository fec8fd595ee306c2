from fastapi import APIRouter, Depends, Path
from storefront.api.dependencies import get_user_service
from storefront.api.errors import ERROR_RESPONSES
from storefront.services.user_service import UserService
from storefront.domain.schemas import MAX_ID, Envelope, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)

@router.post("/", response_model=Envelope[UserRead])
def create_user(payload: UserCreate, service: UserService = Depends(get_user_service)):
    return {"success": True, "message": "User saved.", "data": service.create_user(payload)}

@router.get("/{user_id}", response_model=Envelope[UserRead])
def get_user(user_id: int = Path(..., gt=0, le=MAX_ID), service: UserService = Depends(get_user_service)):
    return {"success": True, "message": "User retrieved.", "data": service.get_user(user_id)}
