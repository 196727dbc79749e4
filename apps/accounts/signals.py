"""
Signals to automatically create a Profile for new Users.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import User, Profile


@receiver(post_save, sender=User)
def create_profile(sender, instance: User, created: bool, **kwargs):
    """
    On user creation ensure a Profile exists (idempotent).
    """
    if not created:
        return
    Profile.objects.get_or_create(user=instance)
