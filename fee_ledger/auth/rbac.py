from fastapi import Depends, HTTPException, status

from fee_ledger.auth.dependencies import get_current_user
from fee_ledger.auth.schemas import CurrentUser
from fee_ledger.core.enums import UserRole

FINANCE_READ_ROLES = (UserRole.SUPERADMIN, UserRole.ADMIN, UserRole.ACCOUNTANT)
FINANCE_WRITE_ROLES = (UserRole.SUPERADMIN, UserRole.ADMIN)


def require_roles(*roles: UserRole):
    """
    Dependency factory to restrict an endpoint to the given roles.

    Example:
        Depends(require_roles(*FINANCE_WRITE_ROLES))
    """
    allowed = {r.value for r in roles}

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _checker
