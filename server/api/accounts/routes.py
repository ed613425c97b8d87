# Organization registration and staff account review routes

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, Path

from .models import RegisterRequest, ApproveRequest
from api.auth.routes import get_staff_user, get_store
from api.auth.models import TokenData
from db.manager import StoreManager
from db.account_operations import AccountOperations
from utils.response import create_success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.post("/register", response_model=Dict[str, Any])
async def register_account(
    register_request: RegisterRequest,
    store: StoreManager = Depends(get_store)
):
    """Submit an application; it waits for dining hall staff approval"""
    data = register_request.model_dump(exclude={"type"}, exclude_none=True)
    account = AccountOperations(store).register(data, register_request.type)

    return create_success_response(
        data=account.public_dict(),
        message="Registration submitted! Your application is pending approval by Dining Hall Staff."
    )


@router.get("", response_model=Dict[str, Any])
async def list_accounts(
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    """Accounts grouped into pending, approved and rejected"""
    groups = AccountOperations(store).list_accounts()
    response_data = {
        status: [account.public_dict() for account in accounts]
        for status, accounts in groups.items()
    }
    return create_success_response(data=response_data, message="OK")


@router.post("/{account_id}/approve", response_model=Dict[str, Any])
async def approve_account(
    approve_request: ApproveRequest,
    account_id: str = Path(..., description="Account ID"),
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    """
    Approve an application and set its password.

    The response includes the welcome email for staff to preview; no mail is sent.
    """
    account, email = AccountOperations(store).approve(account_id, approve_request.password)

    return create_success_response(
        data={"account": account.public_dict(), "email_preview": email.to_dict()},
        message=f"{account.display_name} approved"
    )


@router.post("/{account_id}/reject", response_model=Dict[str, Any])
async def reject_account(
    account_id: str = Path(..., description="Account ID"),
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    account = AccountOperations(store).reject(account_id)
    return create_success_response(data=account.public_dict(), message=f"{account.display_name} rejected")


@router.post("/{account_id}/revoke", response_model=Dict[str, Any])
async def revoke_account(
    account_id: str = Path(..., description="Account ID"),
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    """Withdraw approval; the account's sessions stop working immediately"""
    account = AccountOperations(store).revoke(account_id)
    return create_success_response(data=account.public_dict(), message=f"{account.display_name} revoked")


@router.post("/{account_id}/recover", response_model=Dict[str, Any])
async def recover_account(
    account_id: str = Path(..., description="Account ID"),
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    account = AccountOperations(store).recover(account_id)
    return create_success_response(data=account.public_dict(), message=f"{account.display_name} moved back to pending")


@router.delete("/{account_id}", response_model=Dict[str, Any])
async def delete_account(
    account_id: str = Path(..., description="Account ID"),
    current_staff: TokenData = Depends(get_staff_user),
    store: StoreManager = Depends(get_store)
):
    """Permanently delete a rejected application"""
    account = AccountOperations(store).delete(account_id)
    return create_success_response(data={"account_id": account.id}, message=f"{account.display_name} deleted")
