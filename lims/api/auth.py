from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lims.database import get_db
from lims.models.user import User, UserRole
from lims.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    username: str  # username or e-mail
    password: str


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    display_name: str = ""


class CreateUserRequest(RegisterRequest):
    role: str = UserRole.USER.value


class UpdateUserRequest(BaseModel):
    display_name: str | None = None
    email: str | None = None
    role: str | None = None
    active: bool | None = None
    password: str | None = None


class UserOut(BaseModel):
    id: str
    username: str
    email: str
    display_name: str
    role: str
    active: bool = True
    created_at: str = ""

    model_config = {"from_attributes": True}


def _user_out(u: User) -> UserOut:
    return UserOut(
        id=u.id, username=u.username, email=u.email, display_name=u.display_name,
        role=u.role, active=u.active,
        created_at=u.created_at.isoformat() if u.created_at else "",
    )


def get_current_user(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None, alias="token"),
    db: Session = Depends(get_db),
) -> User:
    """Dependency: extract user from a Bearer header or the JWT cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    if not token:
        raise HTTPException(401, "Not authenticated")
    payload = auth_service.decode_token(token)
    if not payload:
        raise HTTPException(401, "Invalid or expired token")
    user = auth_service.get_user_by_id(db, payload["sub"])
    if not user or not user.active:
        raise HTTPException(401, "User not found or disabled")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(403, "Admin only")
    return user


@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, data.username, data.password)
    if not user:
        raise HTTPException(401, "Invalid username or password")
    token = auth_service.create_access_token(user)
    response.set_cookie("token", token, httponly=True, samesite="lax", max_age=3600 * 72)
    return {"token": token, "user": _user_out(user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie("token")
    return {"ok": True}


@router.post("/register", status_code=201)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        u = auth_service.create_user(db, data.username, data.email, data.password, data.display_name)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _user_out(u)


@router.get("/validate")
def validate_token(user: User = Depends(get_current_user)):
    return _user_out(user)


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return _user_out(user)


@router.get("/users")
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return [_user_out(u) for u in auth_service.list_users(db)]


@router.post("/users", status_code=201)
def create_user(data: CreateUserRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        u = auth_service.create_user(db, data.username, data.email, data.password, data.display_name, data.role)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _user_out(u)


@router.get("/users/{user_id}")
def get_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    target = auth_service.get_user_by_id(db, user_id)
    if not target:
        raise HTTPException(404, "User not found")
    return _user_out(target)


@router.patch("/users/{user_id}")
def update_user(
    user_id: str,
    data: UpdateUserRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    target = auth_service.get_user_by_id(db, user_id)
    if not target:
        raise HTTPException(404, "User not found")
    if target.id == admin.id and (data.active is False or data.role not in (None, UserRole.ADMIN.value)):
        raise HTTPException(400, "Cannot demote or disable yourself")
    try:
        target = auth_service.update_user(
            db, target, data.display_name, data.email, data.role, data.active, data.password
        )
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _user_out(target)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    if user_id == admin.id:
        raise HTTPException(400, "Cannot delete yourself")
    if not auth_service.delete_user(db, user_id):
        raise HTTPException(404, "User not found")
