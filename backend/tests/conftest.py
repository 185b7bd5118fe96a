import random

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.session import PlayerSession


User = get_user_model()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(username=None, balance=None):
        counter["n"] += 1
        username = username or f"player{counter['n']}"
        user = User.objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="secret123",
        )
        if balance is not None:
            from ledger.services import deduct_game_points, grant_signup_bonus
            from ledger.models import Transaction

            # move the bonus balance to the requested amount through the ledger
            user.profile.refresh_from_db()
            diff = balance - user.profile.points_balance
            if diff > 0:
                grant_signup_bonus(user.profile, diff)
            elif diff < 0:
                deduct_game_points(user, None, -diff, Transaction.GAME_BET)
        user.profile.refresh_from_db()
        return user

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def session_for():
    return PlayerSession.for_user


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client


class FixedRandom:
    """rng stub: randrange returns a chosen index, choice walks a list."""

    def __init__(self, index=0, choices=None):
        self.index = index
        self._choices = list(choices or [])

    def randrange(self, n):
        return self.index % n

    def choice(self, seq):
        return self._choices.pop(0)


@pytest.fixture
def fixed_rng():
    return FixedRandom
