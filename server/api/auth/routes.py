# Authentication routes and the shared request dependencies

import logging
from typing import Dict, Any, Callable
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .models import StaffLoginRequest, AccountLoginRequest, LoginResponse, TokenData
from db.manager import StoreManager
from db.account_operations import AccountOperations
from utils.config import Config
from utils.security import JWTManager, verify_shared_secret
from utils.validators import validate_role
from utils.response import create_success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

config = Config()
jwt_manager = JWTManager(
    secret_key=config.get("auth.jwt_secret_key"),
    algorithm=config.get("auth.jwt_algorithm", "HS256"),
    access_token_expire_minutes=config.get("auth.access_token_expire_minutes", 1440)
)
security = HTTPBearer(auto_error=False)

# process-memory state shared by every request
_store = StoreManager()


def get_store() -> StoreManager:
    """Application store (overridden in tests)"""
    return _store


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store: StoreManager = Depends(get_store)
) -> TokenData:
    """
    Resolve the caller from the bearer token.

    Organization tokens are re-checked against the account on every request, so a
    revoked or deleted account loses access immediately.
    """
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign-in required")

    payload = jwt_manager.decode_token(credentials.credentials)
    if not payload or not validate_role(payload.get("role")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session invalid or expired, please sign in again"
        )

    account_id = payload.get("account_id")
    if account_id is not None:
        account = store.accounts.get(account_id)
        if account is None or account.status != "approved" or account.type != payload["role"]:
            logger.warning(f"Rejected token for account {account_id}: no longer approved")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is no longer approved"
            )

    return TokenData(role=payload["role"], account_id=account_id)


def require_roles(*roles: str) -> Callable[..., TokenData]:
    """Dependency factory restricting a route to the given roles"""
    def dependency(current_user: TokenData = Depends(get_current_user)) -> TokenData:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not available for role {current_user.role}"
            )
        return current_user

    return dependency


def get_staff_user(current_user: TokenData = Depends(require_roles("dining-hall"))) -> TokenData:
    """Dining hall staff only"""
    return current_user


def _issue_token(role: str, account_id: str = None) -> Dict[str, Any]:
    claims = {"role": role}
    if account_id is not None:
        claims["account_id"] = account_id

    response_data = LoginResponse(
        access_token=jwt_manager.create_access_token(claims),
        expires_in=jwt_manager.access_token_expire_minutes * 60,
        role=role,
        account_id=account_id
    )
    return response_data.model_dump()


@router.post("/student", response_model=Dict[str, Any])
async def student_session():
    """Students browse and reserve without an account"""
    return create_success_response(data=_issue_token("student"), message="Signed in as student")


@router.post("/staff/login", response_model=Dict[str, Any])
async def staff_login(login_request: StaffLoginRequest):
    """Dining hall staff sign-in with the configured staff password"""
    if not verify_shared_secret(login_request.password, config.get("auth.staff_password")):
        logger.warning("Failed staff sign-in")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password. Please try again."
        )

    logger.info("Dining hall staff signed in")
    return create_success_response(data=_issue_token("dining-hall"), message="Signed in as dining hall staff")


@router.post("/login", response_model=Dict[str, Any])
async def account_login(
    login_request: AccountLoginRequest,
    store: StoreManager = Depends(get_store)
):
    """Student group / food bank sign-in"""
    result = AccountOperations(store).authenticate(login_request.email, login_request.password)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password, or account not approved yet"
        )

    role, account = result
    return create_success_response(
        data=_issue_token(role, account.id),
        message=f"Signed in as {account.display_name}"
    )


@router.get("/me", response_model=Dict[str, Any])
async def get_current_user_info(
    current_user: TokenData = Depends(get_current_user),
    store: StoreManager = Depends(get_store)
):
    """Current role and, for organizations, the account"""
    response_data = current_user.model_dump()
    if current_user.account_id is not None:
        response_data["account"] = store.accounts.require(current_user.account_id).public_dict()

    return create_success_response(data=response_data, message="OK")
