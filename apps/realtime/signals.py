"""
Bump realtime feed versions whenever a row of a registered table changes.
"""
from django.db.models.signals import post_delete, post_save

from .registry import FEEDS
from .services import publish_instance

_feed_by_model = {}


def _on_save(sender, instance, created, **kwargs):
    feed = _feed_by_model.get(sender)
    if feed is not None:
        publish_instance(feed, instance, "INSERT" if created else "UPDATE")


def _on_delete(sender, instance, **kwargs):
    feed = _feed_by_model.get(sender)
    if feed is not None:
        publish_instance(feed, instance, "DELETE")


def connect_feeds():
    for feed in FEEDS.values():
        model = feed.get_model()
        _feed_by_model[model] = feed
        post_save.connect(_on_save, sender=model, dispatch_uid=f"realtime-save-{feed.table}")
        post_delete.connect(_on_delete, sender=model, dispatch_uid=f"realtime-delete-{feed.table}")
