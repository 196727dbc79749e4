# chat/services.py
import logging

from django.db import transaction
from django.db.models import Q
from rest_framework.exceptions import PermissionDenied

from apps.realtime.services import touch
from common.exceptions import WorkflowError

from .models import Group, GroupMember, Message

logger = logging.getLogger(__name__)


def conversation(user_a_id, user_b_id):
    """Direct messages between two users, oldest first."""
    return (
        Message.objects.filter(
            Q(sender_id=user_a_id, receiver_id=user_b_id) | Q(sender_id=user_b_id, receiver_id=user_a_id)
        )
        .select_related("sender__profile")
        .order_by("created_at")
    )


def send_direct_message(*, sender, receiver, content="", image_url=None) -> Message:
    if sender.id == receiver.id:
        raise WorkflowError("You cannot message yourself.")
    if not content and not image_url:
        raise WorkflowError("A message needs text or an image.")
    return Message.objects.create(sender=sender, receiver=receiver, content=content, image_url=image_url)


def mark_conversation_read(*, reader, partner_id) -> int:
    updated = Message.objects.filter(sender_id=partner_id, receiver_id=reader.id, read=False).update(read=True)
    if updated:
        touch("messages", receiver_id=reader.id, sender_id=partner_id)
    return updated


def is_member(group_id, user_id) -> bool:
    return GroupMember.objects.filter(group_id=group_id, user_id=user_id).exists()


@transaction.atomic
def create_group(*, creator, name, description="", image_url=None) -> Group:
    group = Group.objects.create(name=name, description=description, image_url=image_url, created_by=creator)
    GroupMember.objects.create(group=group, user=creator)
    return group


def join_group(*, group: Group, user) -> GroupMember:
    member, _ = GroupMember.objects.get_or_create(group=group, user=user)
    return member


@transaction.atomic
def leave_group(*, group: Group, user):
    if group.created_by_id == user.id:
        raise WorkflowError("The group creator cannot leave the group.")
    deleted, _ = GroupMember.objects.filter(group=group, user=user).delete()
    if not deleted:
        raise WorkflowError("You are not a member of this group.")


def send_group_message(*, group: Group, sender, content="", image_url=None) -> Message:
    if not is_member(group.id, sender.id):
        raise PermissionDenied("Only members can post in this group.")
    if not content and not image_url:
        raise WorkflowError("A message needs text or an image.")
    return Message.objects.create(sender=sender, group=group, content=content, image_url=image_url)
