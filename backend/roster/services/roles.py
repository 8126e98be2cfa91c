from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from django.db import transaction

from roster.domain.models import ServiceRole
from roster.domain.repositories import ServiceRoleRepository
from roster.exceptions import ConflictOnDelete, NotFoundError, ValidationError
from roster.utils import parse_flag

log = logging.getLogger(__name__)

def _get_role(role_id: int) -> ServiceRole:
    role = ServiceRole.objects.filter(id=role_id).first()
    if role is None:
        raise NotFoundError(f"Service role {role_id} not found.")
    return role

def _clean_capacity(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Field 'maxOccupants' must be an integer.")
    if value < 1:
        raise ValidationError("Field 'maxOccupants' must be at least 1.")
    return value

def create_role(name: str, *, description: Optional[str] = None, is_active: bool = True,
                max_occupants: Optional[int] = 1) -> ServiceRole:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Field 'name' is required.")
    return ServiceRole.objects.create(
        name=name, description=description or None, is_active=parse_flag(is_active, "isActive"),
        order=ServiceRoleRepository.next_order(), max_occupants=_clean_capacity(max_occupants),
    )

def update_role(role_id: int, **changes) -> ServiceRole:
    """Applies a partial update to a role.

    Args:
        role_id (int): The role's ID.
        **changes: Any of name, description, is_active, max_occupants.

    Returns:
        ServiceRole: The updated role.
    """
    role = _get_role(role_id)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Field 'name' cannot be empty.")
        role.name = name
    if "description" in changes:
        role.description = changes["description"] or None
    if "is_active" in changes:
        role.is_active = parse_flag(changes["is_active"], "isActive")
    if "max_occupants" in changes:
        role.max_occupants = _clean_capacity(changes["max_occupants"])
    role.save()
    return role

def delete_role(role_id: int) -> None:
    role = _get_role(role_id)
    if ServiceRoleRepository.is_referenced(role):
        raise ConflictOnDelete(f"Service role '{role.name}' is used by roster assignments.")
    log.info("Deleting service role %s", role)
    role.delete()

@transaction.atomic
def reorder_roles(role_ids: Sequence[int]) -> List[ServiceRole]:
    """Reassigns the order of every role to follow role_ids (0..n-1).

    Raises:
        ValidationError: role_ids is not a permutation of all role IDs.
    """
    try:
        ids = [int(i) for i in role_ids]
    except (TypeError, ValueError):
        raise ValidationError("Field 'roleIds' must be a list of integers.")
    roles = {r.id: r for r in ServiceRole.objects.select_for_update()}
    if len(ids) != len(set(ids)) or set(ids) != set(roles):
        raise ValidationError("Field 'roleIds' must list every service role exactly once.")
    for position, rid in enumerate(ids):
        role = roles[rid]
        if role.order != position:
            role.order = position
            role.save(update_fields=["order"])
    log.info("Service roles reordered: %s", ids)
    return [roles[rid] for rid in ids]

