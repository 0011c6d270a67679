"""Services package."""

from rentdesk.services.journey_service import JourneyService
from rentdesk.services.result import ErrorCode, ServiceError, ServiceResult

__all__ = ["JourneyService", "ErrorCode", "ServiceError", "ServiceResult"]
