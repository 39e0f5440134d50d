"""
Web 서비스 패키지

비즈니스 로직 처리
"""

from web.services.balance_service import BalanceService
from web.services.invitation_service import Invitation, InvitationService

__all__ = [
    "BalanceService",
    "Invitation",
    "InvitationService",
]
