"""
Identity of the user a page is rendered for

Authentication happens in the host application; requests arrive with the
viewer's id and granted capabilities already resolved.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

UPDATE_BOOKING_CAPABILITY = "mod/booking:updatebooking"


@dataclass(frozen=True)
class Viewer:
    """Current user and the capabilities the host granted them"""

    user_id: Optional[int] = None
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_anonymous(self) -> bool:
        return not self.user_id

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities


ANONYMOUS = Viewer()
