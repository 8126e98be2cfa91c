from __future__ import annotations

from django.db.models.signals import post_save, post_delete, pre_save

from .models import Availability, FinalizedRoster, Member, RosterAssignment, ServiceRole, SpecialDay
from roster.services.audit import audit, snapshot_instance

# =========================

AUDITED_MODELS = (RosterAssignment, Availability, Member, ServiceRole, SpecialDay, FinalizedRoster)

def _capture_before(sender, instance, **kwargs) -> None:
    """Keeps the stored state of the instance for the audit entry."""
    if not instance.pk:
        instance._before_snapshot = None
        return
    old = sender.objects.filter(pk=instance.pk).first()
    instance._before_snapshot = snapshot_instance(old) if old is not None else None

def _audit_save(sender, instance, created: bool, **kwargs) -> None:
    if kwargs.get("raw"):
        return
    action = "create" if created else "update"
    audit(action, instance, before=getattr(instance, "_before_snapshot", None), after=snapshot_instance(instance))

def _audit_delete(sender, instance, **kwargs) -> None:
    audit("delete", instance, before=snapshot_instance(instance), after=None)

for _model in AUDITED_MODELS:
    uid = f"roster_audit_{_model._meta.model_name}"
    pre_save.connect(_capture_before, sender=_model, dispatch_uid=f"{uid}_pre")
    post_save.connect(_audit_save, sender=_model, dispatch_uid=f"{uid}_post")
    post_delete.connect(_audit_delete, sender=_model, dispatch_uid=f"{uid}_del")
