# accounts/signals.py
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile

logger = logging.getLogger(__name__)

User = get_user_model()


def generate_unique_username(base):
    candidate = base
    suffix = 1
    while Profile.objects.filter(username=candidate).exists():
        suffix += 1
        candidate = f"{base}_{suffix}"
    return candidate


@receiver(post_save, sender=User)
def create_player_profile(sender, instance, created, **kwargs):
    """
    Every new account gets a profile and the welcome bonus.
    """
    if not created:
        return

    from ledger.services import grant_signup_bonus

    base = instance.username or f"player_{instance.user_uid.lower()}"
    profile = Profile.objects.create(
        user=instance,
        username=generate_unique_username(base),
        display_name=instance.first_name or "Player",
    )
    grant_signup_bonus(profile, settings.SIGNUP_BONUS_POINTS)
    logger.info("Created profile %s for user %s", profile.username, instance.pk)
