from app.db.models.user import User
from app.db.models.service import Service, SubService
from app.db.models.booking import Booking
from app.db.models.review import Review

__all__ = ["User", "Service", "SubService", "Booking", "Review"]
