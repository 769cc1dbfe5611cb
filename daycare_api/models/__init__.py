from daycare_api.models.user import User, UserRole
from daycare_api.models.message import Message, RecipientType

__all__ = [
	"User",
	"UserRole",
	"Message",
	"RecipientType",
]
