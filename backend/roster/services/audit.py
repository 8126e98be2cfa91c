from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from django.forms.models import model_to_dict
from django.contrib.auth.models import User

from core.middleware import get_current_user
from roster.domain.models import AuditLog

DEFAULT_EXCLUDE = {"id"}

def snapshot_instance(
    instance, *,
    include: Optional[Iterable[str]] = None,
    exclude: Iterable[str] = DEFAULT_EXCLUDE
) -> Dict[str, Any]:
    """Captures the current field values of a model instance.

    Args:
        instance (Django Model): The instance to capture.
        include (Optional[Iterable[str]], optional): Only these fields. Defaults to None.
        exclude (Iterable[str], optional): Fields left out of the snapshot. Defaults to DEFAULT_EXCLUDE.

    Returns:
        Dict[str, Any]: Field name to value.
    """
    if include:
        return model_to_dict(instance, fields=list(include))
    return model_to_dict(instance, exclude=list(exclude))

def audit(
    action: str,
    instance, *,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
    author: Optional[User] = None,
    table: Optional[str] = None,
    record_id: Optional[str] = None,
) -> None:
    """Writes an audit entry for a model instance.

    Args:
        action (str): "create", "update" or "delete".
        instance (Django Model): The affected instance.
        before (Optional[Dict[str, Any]], optional): State before the action. Defaults to None.
        after (Optional[Dict[str, Any]], optional): State after the action. Defaults to None.
        author (Optional[User], optional): Who acted. Falls back to the request user. Defaults to None.
        table (Optional[str], optional): Table name. Defaults to the model's db_table.
        record_id (Optional[str], optional): Record ID. Defaults to the instance's ID.
    """
    if not table:
        table = instance._meta.db_table
    if not record_id:
        record_id = str(getattr(instance, "id", "unknown"))
    user = author or get_current_user()

    AuditLog.objects.create(
        action=action,
        table=table,
        record_id=record_id,
        before=before,
        after=after,
        author=user if user and user.is_authenticated else None,
    )
