"""
Friend requests, friendships and friends-of-friends suggestions.
"""
import logging
from collections import OrderedDict
from typing import List, Set, Tuple

from django.db import transaction
from django.db.models import Q

from apps.accounts.models import Profile
from apps.notifications.models import ActivityType
from apps.notifications.services import record_activity
from common.exceptions import WorkflowError

from .models import Friend, FriendRequest, FriendRequestStatus

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 20


def friendships_of(user_id):
    return Friend.objects.filter(Q(user1_id=user_id) | Q(user2_id=user_id)).order_by("created_at")


def friend_ids(user_id) -> List:
    """Direct friend ids in friendship order."""
    seen = []
    for f in friendships_of(user_id):
        other = f.other(user_id)
        if other not in seen:
            seen.append(other)
    return seen


def are_friends(a_id, b_id) -> bool:
    return Friend.objects.filter(
        Q(user1_id=a_id, user2_id=b_id) | Q(user1_id=b_id, user2_id=a_id)
    ).exists()


def request_between(a_id, b_id):
    return FriendRequest.objects.filter(
        Q(sender_id=a_id, receiver_id=b_id) | Q(sender_id=b_id, receiver_id=a_id)
    )


def request_party_ids(user_id) -> Set:
    ids = set()
    for sender_id, receiver_id in FriendRequest.objects.filter(
        Q(sender_id=user_id) | Q(receiver_id=user_id)
    ).values_list("sender_id", "receiver_id"):
        ids.add(sender_id)
        ids.add(receiver_id)
    return ids


@transaction.atomic
def send_friend_request(*, sender, receiver) -> FriendRequest:
    if sender.id == receiver.id:
        raise WorkflowError("You cannot send a friend request to yourself.")
    if are_friends(sender.id, receiver.id):
        raise WorkflowError("You are already friends with this user.")
    if request_between(sender.id, receiver.id).exists():
        raise WorkflowError("A friend request already exists between you and this user.")

    req = FriendRequest.objects.create(sender=sender, receiver=receiver)
    record_activity(
        user=receiver,
        activity_type=ActivityType.FRIEND_REQUEST,
        content=f"{sender.username or 'Someone'} sent you a friend request",
        related_id=sender.id,
    )
    return req


@transaction.atomic
def respond_to_request(*, request: FriendRequest, user, accept: bool) -> FriendRequest:
    if request.receiver_id != user.id:
        raise WorkflowError("Only the receiver can respond to this request.")
    if request.status != FriendRequestStatus.PENDING:
        raise WorkflowError("This friend request is no longer pending.")

    request.status = FriendRequestStatus.ACCEPTED if accept else FriendRequestStatus.REJECTED
    request.save(update_fields=["status", "updated_at"])
    if accept and not are_friends(request.sender_id, request.receiver_id):
        Friend.objects.create(user1_id=request.sender_id, user2_id=request.receiver_id)
    return request


@transaction.atomic
def cancel_request(*, request: FriendRequest, user):
    if request.sender_id != user.id:
        raise WorkflowError("Only the sender can cancel this request.")
    if request.status != FriendRequestStatus.PENDING:
        raise WorkflowError("This friend request is no longer pending.")
    request.delete()


@transaction.atomic
def unfriend(*, user, friend_id) -> int:
    """Delete the friendship in both directions along with the request that created it."""
    deleted, _ = Friend.objects.filter(
        Q(user1_id=user.id, user2_id=friend_id) | Q(user1_id=friend_id, user2_id=user.id)
    ).delete()
    if deleted:
        request_between(user.id, friend_id).delete()
    return deleted


def suggest_friends_of_friends(user, limit: int = SUGGESTION_LIMIT) -> List[Tuple[Profile, int]]:
    """
    People two hops away, ranked by the number of mutual friends.

    Excludes the user, direct friends, and anyone with a friend request (of
    any status) to or from the user. Ties keep first-seen order.
    """
    direct = friend_ids(user.id)
    if not direct:
        return []
    direct_set = set(direct)
    excluded = request_party_ids(user.id) | direct_set | {user.id}

    counts = OrderedDict()
    for friend_id in direct:
        for friendship in friendships_of(friend_id):
            candidate = friendship.other(friend_id)
            if candidate in excluded:
                continue
            counts[candidate] = counts.get(candidate, 0) + 1

    if not counts:
        return []

    # sorted() is stable, so equal counts stay in first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    profiles = {
        p.user_id: p
        for p in Profile.objects.select_related("user").filter(user_id__in=[uid for uid, _ in ranked])
    }
    return [(profiles[uid], n) for uid, n in ranked if uid in profiles]


def recommended_users(user, limit: int = 50):
    """Other profiles at the same university or in the same field of study."""
    profile = getattr(user, "profile", None)
    qs = Profile.objects.select_related("user").exclude(user=user)
    if profile is not None and (profile.university or profile.field_of_study):
        match = Q()
        if profile.university:
            match |= Q(university=profile.university)
        if profile.field_of_study:
            match |= Q(field_of_study=profile.field_of_study)
        qs = qs.filter(match)
    return qs.order_by("-created_at")[:limit]
