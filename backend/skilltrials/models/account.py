import enum

from .candidate import Candidate
from .company import Company
from .support_ticket import USER_TYPE_CANDIDATE, USER_TYPE_COMPANY


class AccountRole(str, enum.Enum):
    """Account kinds; each maps to its own table, never to a string-built query."""

    COMPANY = "company"
    CANDIDATE = "candidate"

    @property
    def model(self) -> type[Company] | type[Candidate]:
        return Company if self is AccountRole.COMPANY else Candidate

    @property
    def user_type(self) -> int:
        """Support ticket discriminator."""
        return USER_TYPE_COMPANY if self is AccountRole.COMPANY else USER_TYPE_CANDIDATE
