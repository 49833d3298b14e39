"""Session services: balancing, signup registry, broadcast and viewer state."""

from faceoff.services.balancing_engine import split
from faceoff.services.change_broadcaster import ChangeBroadcaster
from faceoff.services.signup_registry import SignupRegistry
from faceoff.services.viewer_state import ViewerStateReducer

__all__ = [
    "split",
    "ChangeBroadcaster",
    "SignupRegistry",
    "ViewerStateReducer",
]
