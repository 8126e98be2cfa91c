from rest_framework.permissions import BasePermission

class IsRosterAdmin(BasePermission):
    """Allows access only to members flagged as admin."""
    message = "Administrator access required."

    def has_permission(self, request, view):
        member = getattr(request.user, "member", None)
        return bool(member is not None and member.is_admin)
