"""
Services package - Business logic layer
"""

from app.services.auth_service import AuthService
from app.services.dashboard_service import DashboardService
from app.services.hunt_service import HuntService
from app.services.member_service import MemberService
from app.services.point_service import PointService
from app.services.quota_service import QuotaService

__all__ = [
    'AuthService',
    'DashboardService',
    'HuntService',
    'MemberService',
    'PointService',
    'QuotaService'
]
