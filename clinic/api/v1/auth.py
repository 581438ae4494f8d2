from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_admin_id, rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import AdminLogin, TokenResponse

router = APIRouter(prefix="/admin", tags=["Admin"])

@router.post("/login", response_model=TokenResponse)
async def admin_login(
    login_data: AdminLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate an admin and return an access token."""
    return AuthService(db).login_admin(login_data)

@router.get("/dashboard")
async def admin_dashboard(admin_id: int = Depends(get_current_admin_id)):
    """Confirm an admin token is still valid."""
    return {"valid": True, "user_id": admin_id}
