from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth.backends import BaseBackend
from django.contrib.auth.models import User

from roster.domain.models import Member

log = logging.getLogger(__name__)

class PinBackend(BaseBackend):
    """Authenticates a member by ID and PIN.

    The PIN is stored as the password hash of the member's Django user, so the
    regular hashers and session machinery apply.
    """

    def authenticate(self, request, member_id=None, pin=None, **kwargs) -> Optional[User]:
        if member_id is None or pin is None:
            return None
        try:
            member = Member.objects.select_related("user").get(id=int(member_id))
        except (Member.DoesNotExist, TypeError, ValueError):
            return None
        user = member.user
        if user.is_active and user.check_password(str(pin)):
            return user
        log.info("Failed PIN login for member %s", member_id)
        return None

    def get_user(self, user_id) -> Optional[User]:
        return User.objects.filter(pk=user_id, is_active=True).first()
