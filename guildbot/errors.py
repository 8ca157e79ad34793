"""Event errors

Errors that block a requested state change carry a user-facing message and
are answered ephemerally by the command layer. RenderError and
NotificationError only ever reach the log.
"""


class EventError(Exception):
    """Base class for all event lifecycle errors."""

    user_message = "❌ Something went wrong with this event."

    def __init__(self, message: str = None):
        super().__init__(message or self.user_message)
        self.user_message = message or self.user_message


# ============================================================================
# NOT FOUND
# ============================================================================

class NotFoundError(EventError):
    user_message = "❌ Not found!"


class EventNotFound(NotFoundError):
    user_message = "❌ Event not found!"

    def __init__(self, event_id=None):
        super().__init__()
        self.event_id = event_id


class ParticipantNotFound(NotFoundError):
    user_message = "❌ You need to RSVP to this event first!"

    def __init__(self, event_id=None, user_id=None):
        super().__init__()
        self.event_id = event_id
        self.user_id = user_id


# ============================================================================
# CAPACITY / STATE
# ============================================================================

class CapacityError(EventError):
    user_message = "❌ This event is full!"


class EventFull(CapacityError):
    user_message = "❌ This event is full! You can still sign up as Tentative."

    def __init__(self, event_id=None, capacity: int = 0):
        super().__init__()
        self.event_id = event_id
        self.capacity = capacity


class StateError(EventError):
    user_message = "❌ This event can no longer be changed."


class EventCancelled(StateError):
    user_message = "❌ This event has been cancelled!"

    def __init__(self, event_id=None):
        super().__init__()
        self.event_id = event_id


class EventAlreadyCancelled(StateError):
    user_message = "❌ This event is already cancelled."

    def __init__(self, event_id=None):
        super().__init__()
        self.event_id = event_id


# ============================================================================
# INPUT / PERMISSIONS
# ============================================================================

class EventValidationError(EventError):
    user_message = "❌ Invalid event details."


class InvalidSelection(EventValidationError):
    user_message = "❌ That selection is not available."


class PermissionDenied(EventError):
    user_message = "❌ You can only cancel your own events!"


# ============================================================================
# BEST-EFFORT SIDE EFFECTS
# ============================================================================

class RenderError(EventError):
    """The public event message could not be sent or edited."""


class MessageGone(RenderError):
    """The event message or its channel no longer exists."""


class NotificationError(EventError):
    """A direct notice could not be delivered to one user."""

    def __init__(self, user_id=None, message: str = None):
        super().__init__(message)
        self.user_id = user_id
