"""ORM Models: SQLAlchemy declarative models for every trade entity.

Invariants:
    - All models inherit from Base (db/base.py)
    - Rows are written ONLY by the atomic procedures in infrastructure/trade_procedures.py

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from tradehub.models.user import User  # noqa: F401
from tradehub.models.listing import Listing  # noqa: F401
from tradehub.models.offer import Offer, OfferItem  # noqa: F401
from tradehub.models.match import Match, Conversation  # noqa: F401
from tradehub.models.message import Message  # noqa: F401
from tradehub.models.meetup import Meetup  # noqa: F401
from tradehub.models.moderation import Report, ShopEvent  # noqa: F401
