from fastapi import Depends

from ..models.account import AccountRole
from .dependencies import CurrentUser, get_current_user
from .error_handlers import ForbiddenError


def _role_required(required_role: AccountRole):
    def check_role(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role != required_role:
            raise ForbiddenError(f"{required_role.value.capitalize()} access only")
        return user
    return check_role


company_only = _role_required(AccountRole.COMPANY)
candidate_only = _role_required(AccountRole.CANDIDATE)
