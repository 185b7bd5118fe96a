"""Per-request player context.

A PlayerSession is built from the authenticated request (or websocket
scope) and handed to the game services explicitly.
"""
from dataclasses import dataclass

from .models import Profile


class NoProfile(Exception):
    pass


@dataclass
class PlayerSession:
    user: object
    profile: Profile

    @classmethod
    def for_user(cls, user):
        try:
            profile = Profile.objects.get(user=user)
        except Profile.DoesNotExist:
            raise NoProfile(f"No profile for user {user.pk}")
        return cls(user=user, profile=profile)

    @classmethod
    def from_request(cls, request):
        return cls.for_user(request.user)

    @property
    def user_id(self):
        return self.user.pk

    def refresh(self):
        self.profile.refresh_from_db()
        return self.profile

    def can_afford(self, amount: int) -> bool:
        # Advisory only; the ledger re-checks under the row lock.
        return self.profile.points_balance >= amount
