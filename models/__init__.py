# models/__init__.py
from .booking import BookingCreateRequest, BookingStatus, BookingStatusUpdate
from .message import MessageCreateRequest
from .provider import ProfileUpdateRequest
from .review import ReviewCreateRequest
from .service import ServiceCreateRequest
from .user import LoginRequest, RegisterRequest, UserRole, to_public_user

__all__ = [
    "BookingCreateRequest",
    "BookingStatus",
    "BookingStatusUpdate",
    "LoginRequest",
    "MessageCreateRequest",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "ReviewCreateRequest",
    "ServiceCreateRequest",
    "UserRole",
    "to_public_user",
]
