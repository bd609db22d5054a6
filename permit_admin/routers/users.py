from fastapi import APIRouter, Depends

from permit_admin.dependencies import get_current_user, get_user_repo
from permit_admin.schemas.user import User, UserUpdate
from permit_admin.services import user_service
from permit_admin.services.repository import UserRepository

router = APIRouter()


@router.get("/users/me", response_model=User, summary="Current user profile")
def current_user(user: User = Depends(get_current_user)):
    return user


@router.get("/users", response_model=list[User], summary="All staff accounts (admin)")
def list_users(user: User = Depends(get_current_user), users: UserRepository = Depends(get_user_repo)):
    return user_service.list_users(user, users)


@router.patch("/users/{user_id}", response_model=User, summary="Change role / lot assignments (admin)")
def update_user(user_id: str, body: UserUpdate, user: User = Depends(get_current_user),
                users: UserRepository = Depends(get_user_repo)):
    return user_service.update_user(user, user_id, body, users)
