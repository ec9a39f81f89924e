from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from ...core import security
from ...core.auth import authenticate_user
from ...core.errors import UnauthorizedError
from ...db.session import get_db
from ...db import models, schemas
from ...services import user_service
from .. import deps


router = APIRouter(prefix="/auth", tags=["auth"])


class TokenResponse(schemas.Token):
    user: schemas.User


def _issue_token(user: models.User) -> TokenResponse:
    token = security.create_access_token({"sub": str(user.id), "role": user.role.value})
    return TokenResponse(access_token=token, user=schemas.User.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    user = user_service.register_user(
        db, email=payload.email, password=payload.password, name=payload.name, phone=payload.phone
    )
    return _issue_token(user)


@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise UnauthorizedError("Invalid email or password")
    return _issue_token(user)


@router.get("/me", response_model=schemas.User)
def me(current: models.User = Depends(deps.get_current_user)):
    return current
