from .user.user import User
from .trips.trip_model import Trip
from .trips.trip_member import TripMember, TripRole, MemberStatus
from .trips.trip_invite import TripInviteLink
from .trips.trip_plan import TripPlan
from .trips.trip_location import TripLocation
from .trips.trip_destination import TripDestination, TravelMode
from .itinerary.schedule_item import TripScheduleItem
from .trips.trip_comment import TripComment
from .trips.trip_activity import TripActivity
from .ai.destination_context import DestinationContext
from .trips.trip_checklist import TripChecklist, ChecklistType
from .ai.chat_message import TripChatMessage, ChatRole
