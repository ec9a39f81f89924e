from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Identity of the caller, resolved once by the auth layer."""

    user_id: int
    is_admin: bool = False

    def can_act_for(self, owner_id: int) -> bool:
        return self.is_admin or self.user_id == owner_id
