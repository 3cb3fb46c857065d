"""
/api/users: thin wrappers around UserStore.

Route handlers only translate "absent" into a 404 and wrap results in the
success envelope; validation and uniqueness live in the store, status codes
for raised errors are decided by the error handlers.
"""

from fastapi import APIRouter, Depends, status

from app.api.schemas import SuccessResponse, UserCreate, UserRead, UserUpdate
from app.core.dependencies import get_user_store
from app.exceptions.base import ApiError, ValidationError
from app.repositories.user_store import UserStore

router = APIRouter(prefix="/api/users", tags=["users"])

MSG_USER_NOT_FOUND = "User not found"
MSG_MISSING_FIELDS = "Please provide name, email and age"


def _missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@router.get("", response_model=SuccessResponse[list[UserRead]], response_model_exclude_none=True)
async def list_users(store: UserStore = Depends(get_user_store)):
    users = store.find_all()
    return SuccessResponse(count=len(users), data=[UserRead.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=SuccessResponse[UserRead], response_model_exclude_none=True)
async def get_user(user_id: str, store: UserStore = Depends(get_user_store)):
    user = store.find_by_id(user_id)
    if user is None:
        raise ApiError(MSG_USER_NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    return SuccessResponse(data=UserRead.model_validate(user))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[UserRead],
    response_model_exclude_none=True,
)
async def create_user(payload: UserCreate, store: UserStore = Depends(get_user_store)):
    if any(_missing(v) for v in (payload.name, payload.email, payload.age)):
        raise ValidationError([MSG_MISSING_FIELDS])
    user = store.create(payload.model_dump())
    return SuccessResponse(data=UserRead.model_validate(user))


@router.put("/{user_id}", response_model=SuccessResponse[UserRead], response_model_exclude_none=True)
async def update_user(user_id: str, payload: UserUpdate, store: UserStore = Depends(get_user_store)):
    user = store.update(user_id, payload.model_dump(exclude_unset=True))
    if user is None:
        raise ApiError(MSG_USER_NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    return SuccessResponse(data=UserRead.model_validate(user))


@router.delete("/{user_id}", response_model=SuccessResponse[UserRead], response_model_exclude_none=True)
async def delete_user(user_id: str, store: UserStore = Depends(get_user_store)):
    user = store.delete(user_id)
    if user is None:
        raise ApiError(MSG_USER_NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    return SuccessResponse(message="User deleted successfully", data=UserRead.model_validate(user))
