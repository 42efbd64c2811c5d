"""Pipeline Registry: explicit name -> Pipeline routing for the RPC layer.

Invariants:
    - Every mapping is visible here; no auto-discovery
    - Keys equal Pipeline.name
"""

from tradehub.pipelines.accept_offer import accept_offer
from tradehub.pipelines.complete_meetup import complete_meetup
from tradehub.pipelines.create_offer import create_offer
from tradehub.pipelines.decline_offer import decline_offer
from tradehub.pipelines.engine import Pipeline
from tradehub.pipelines.expire_listing import expire_listing
from tradehub.pipelines.send_message import send_message

PIPELINES: dict[str, Pipeline] = {
    "createOffer": create_offer,
    "acceptOffer": accept_offer,
    "declineOffer": decline_offer,
    "expireListing": expire_listing,
    "completeMeetup": complete_meetup,
    "sendMessage": send_message,
}


def get_pipeline(name: str) -> Pipeline | None:
    return PIPELINES.get(name)
