# Models package (re-export feature modules for stable imports)
from .users.profile import Profile
from .health.doctor import Doctor
from .health.appointment import Appointment
from .health.chat_message import ChatMessage

__all__ = [
    "Profile",
    "Doctor",
    "Appointment",
    "ChatMessage",
]
