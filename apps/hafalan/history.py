"""History ledger: append-only snapshots of every hafalan record mutation."""
from .models import HafalanHistory

Action = HafalanHistory.Action


def append(record, teacher_id, action, completed_verses_snapshot=None, note_snapshot=None):
    """
    Snapshot ``record`` after a mutation. Snapshots default to the record's
    current verses and note; pass them explicitly only to record something
    other than the saved state.
    """
    return HafalanHistory.objects.create(
        hafalan_record=record,
        teacher_id=teacher_id,
        action=action,
        completed_verses_snapshot=(
            record.completed_verses if completed_verses_snapshot is None else completed_verses_snapshot
        ),
        status_snapshot=record.status,
        note_snapshot=record.notes if note_snapshot is None else note_snapshot,
    )


def list_history(record_id):
    return list(
        HafalanHistory.objects
        .filter(hafalan_record_id=record_id)
        .select_related("teacher__user")
        .order_by("occurred_at", "id")
    )


def contributors(record_id):
    """Teachers who touched the record, in the order they first appear."""
    seen = {}
    for entry in list_history(record_id):
        seen.setdefault(entry.teacher_id, entry.teacher)
    return list(seen.values())
