from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import get_current_user
from villa_admin.core.config import settings
from villa_admin.core.security import create_access_token
from villa_admin.database.session import get_db
from villa_admin.schemas.auth import LoginForm
from villa_admin.services.auth_service import authenticate

router = APIRouter(prefix="/auth", tags=["Auth"])


# ------------------------
# Login Submit
# ------------------------
@router.post("/login", name="login_submit")
def login(
    request: Request,
    form: LoginForm = Depends(LoginForm.as_form),
    db: Session = Depends(get_db)
):
    user = authenticate(db, form.email, form.password)

    token = create_access_token({
        "user_id": user["id"],
        "role": user["role"]
    })

    response = JSONResponse({"success": True, "user": user})
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return response


@router.post("/logout", name="logout")
def logout(request: Request):
    """
    Logout the user: delete the session cookie and respond with success.
    """
    response = JSONResponse({"success": True})
    response.delete_cookie("access_token", path="/")
    return response


@router.get("/me", name="current_user")
def me(current_user: dict = Depends(get_current_user)):
    return current_user
