# Import every model so relationship targets resolve wherever one is used

from .events import Event
from .registrations import Registration, RegistrationType
from .teams import Team, TeamMember

__all__ = ["Event", "Registration", "RegistrationType", "Team", "TeamMember"]
