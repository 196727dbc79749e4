from rest_framework import permissions


class IsOwnerOrReadOnly(permissions.BasePermission):
    """
    Read-only for non-owners.
    Write allowed only for the object's owner as defined by `.user`, `.sender`,
    `.creator` or `.created_by`.
    """
    message = "You must be the owner to perform this action."
    owner_attrs = ("user", "sender", "creator", "created_by")

    def has_object_permission(self, request, view, obj):
        # always allow safe methods
        if request.method in permissions.SAFE_METHODS:
            return True
        for attr in self.owner_attrs:
            if hasattr(obj, f"{attr}_id"):
                return getattr(obj, f"{attr}_id") == request.user.id
        # fallback - deny
        return False
