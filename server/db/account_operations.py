# Organization account registration, staff approval workflow and sign-in

import logging
from typing import Dict, Any, List, Optional, Tuple
from pydantic import ValidationError as SchemaError

from .manager import StoreManager
from .models import ACCOUNT_MODELS, PendingUser, evolve
from utils.exceptions import ValidationError, InvalidTransitionError
from utils.notifications import EmailContent, generate_approval_email_content
from utils.security import hash_password, verify_password
from utils.validators import validate_account_type, validate_email, validate_non_blank

logger = logging.getLogger(__name__)

# action -> (statuses it may start from, status it leads to); None means the record is removed
TRANSITIONS = {
    'approve': (('pending',), 'approved'),
    'reject': (('pending',), 'rejected'),
    'revoke': (('approved',), 'pending'),
    'recover': (('rejected',), 'pending'),
    'delete': (('rejected',), None),
}

SERVER_FIELDS = ('id', 'seq', 'created_at', 'status', 'password_hash', 'type')


class AccountOperations:
    """
    Account workflow:

        pending -> approved | rejected
        approved -> pending      (revoke, clears the password)
        rejected -> pending      (recover)
        rejected -> deleted      (delete, permanent)

    A password hash exists only while the account is approved.
    """
    def __init__(self, store: StoreManager):
        self.store = store

    def _check_transition(self, account: PendingUser, action: str):
        allowed_from, _ = TRANSITIONS[action]
        if account.status not in allowed_from:
            raise InvalidTransitionError(
                f"Cannot {action} account {account.id} while it is {account.status}"
            )

    def _email_in_use(self, email: str) -> bool:
        email = email.strip().lower()
        return any(a.email.lower() == email for a in self.store.accounts.list())

    def get_account(self, account_id: str) -> PendingUser:
        return self.store.read(lambda: self.store.accounts.require(account_id))

    def list_accounts(self) -> Dict[str, List[PendingUser]]:
        """Accounts partitioned by status, oldest first within each group"""
        accounts = sorted(self.store.read(self.store.accounts.list), key=lambda a: a.seq)
        return {
            status: [a for a in accounts if a.status == status]
            for status in ('pending', 'approved', 'rejected')
        }

    def register(self, data: Dict[str, Any], account_type: str) -> PendingUser:
        """
        Submit an organization registration.

        Args:
            data: email, phone_number and the type-specific fields
            account_type: 'student-group' or 'food-bank'

        Returns:
            the new pending account (no password)

        Raises:
            ValidationError: unknown type, missing/invalid fields or email already registered
        """
        if not validate_account_type(account_type):
            raise ValidationError(f"Unknown account type: {account_type}", field='type')

        email = data.get('email')
        if not validate_email(email):
            raise ValidationError("Please provide a valid email address.", field='email')

        fields = {k: v for k, v in data.items() if k not in SERVER_FIELDS}
        model = ACCOUNT_MODELS[account_type]

        def register_operation():
            if self._email_in_use(email):
                raise ValidationError(f"An account for {email} already exists.", field='email')

            account_id, seq, created_at = self.store.next_identity('account')
            try:
                account = model(
                    **fields,
                    id=account_id,
                    seq=seq,
                    created_at=created_at,
                    status='pending',
                    password_hash=None,
                )
            except SchemaError as e:
                first = e.errors()[0]
                field = '.'.join(str(p) for p in first.get('loc', ()))
                raise ValidationError(f"Invalid registration field {field}: {first.get('msg')}",
                                      field=field or None)

            return self.store.accounts.add(account)

        account = self.store.run(register_operation)
        logger.info(f"Registration {account.id} submitted for {account.type} {account.display_name}")
        return account

    def approve(self, account_id: str, password: str) -> Tuple[PendingUser, EmailContent]:
        """
        Approve a pending account and give it a password.

        Args:
            account_id: account to approve
            password: temporary password chosen by staff

        Returns:
            (approved account, welcome email content for the operator to review)

        Raises:
            NotFoundError, InvalidTransitionError, ValidationError (blank password)
        """
        if not validate_non_blank(password):
            raise ValidationError("Please provide a password for the account.", field='password')
        password_hash = hash_password(password)

        def approve_operation():
            account = self.store.accounts.require(account_id)
            self._check_transition(account, 'approve')
            return self.store.accounts.replace(evolve(
                account, status='approved', password_hash=password_hash
            ))

        account = self.store.run(approve_operation)
        logger.info(f"Account {account_id} approved")

        email = generate_approval_email_content(account.display_name, account.email, password)
        return account, email

    def reject(self, account_id: str) -> PendingUser:
        return self._move(account_id, 'reject')

    def revoke(self, account_id: str) -> PendingUser:
        """Send an approved account back to pending and clear its password"""
        return self._move(account_id, 'revoke', password_hash=None)

    def recover(self, account_id: str) -> PendingUser:
        return self._move(account_id, 'recover')

    def _move(self, account_id: str, action: str, **changes) -> PendingUser:
        _, target = TRANSITIONS[action]

        def move_operation():
            account = self.store.accounts.require(account_id)
            self._check_transition(account, action)
            return self.store.accounts.replace(evolve(account, status=target, **changes))

        account = self.store.run(move_operation)
        logger.info(f"Account {account_id} {action}: now {account.status}")
        return account

    def delete(self, account_id: str) -> PendingUser:
        """
        Permanently remove a rejected account.

        Raises:
            NotFoundError, InvalidTransitionError when the account is not rejected
        """
        def delete_operation():
            account = self.store.accounts.require(account_id)
            self._check_transition(account, 'delete')
            return self.store.accounts.delete(account_id)

        account = self.store.run(delete_operation)
        logger.info(f"Account {account_id} deleted")
        return account

    def authenticate(self, email: str, password: str) -> Optional[Tuple[str, PendingUser]]:
        """
        Sign in an organization account.

        Email matches case-insensitively; only approved accounts with a matching
        password succeed.

        Returns:
            (role, account) or None
        """
        if not validate_non_blank(email) or not validate_non_blank(password):
            return None

        wanted = email.strip().lower()
        accounts = self.store.read(self.store.accounts.list)
        for account in accounts:
            if account.email.lower() != wanted or account.status != 'approved':
                continue
            if verify_password(password, account.password_hash):
                logger.info(f"Account {account.id} signed in")
                return account.type, account

        logger.warning(f"Failed sign-in for {wanted}")
        return None
