# Schemas package (re-export feature modules for stable imports)
from .appointments.appointment import *
from .doctors.doctor import *
from .chat.chat import *
from .profiles.profile import *
from .payments.invoice import *
