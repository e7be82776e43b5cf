"""
Hafalan record state machine.

    PROGRESS ──(full coverage)──▶ COMPLETE_WAITING_RECHECK ──(all passed)──▶ RECHECK_PASSED
       ▲  │                              ▲  │
       └──┘ verse added                  └──┘ round with failures

Verses recorded as memorized are never taken back: a failed recheck only
narrows what still has to be demonstrated (see ``recheck``).
"""
import logging

from django.db.models import Count

from . import history
from .exceptions import (
    DuplicateOpenRecord,
    InvalidStatusTransition,
    NoRecheckPending,
    RecordAlreadyFinalized,
)
from .models import HafalanRecord
from .transactions import atomic_operation
from .verses import VerseSet

logger = logging.getLogger(__name__)

Status = HafalanRecord.Status

TRANSITIONS = {
    Status.PROGRESS: frozenset({Status.PROGRESS, Status.COMPLETE_WAITING_RECHECK}),
    Status.COMPLETE_WAITING_RECHECK: frozenset({Status.COMPLETE_WAITING_RECHECK, Status.RECHECK_PASSED}),
    Status.RECHECK_PASSED: frozenset(),
}


def can_transition(current, target):
    return Status(target) in TRANSITIONS[Status(current)]


def transition(record, target):
    """Move ``record`` to ``target`` in memory; the caller saves it."""
    if not can_transition(record.status, target):
        raise InvalidStatusTransition(record.status, target)
    # new records are logged by their creator once saved
    if record.status != target and record.pk is not None:
        logger.info("Hafalan record %s: %s → %s", record.pk, record.status, target)
    record.status = Status(target)
    return record


def status_for_coverage(completed, verse_range):
    """Status a PROGRESS record should be in given its verse coverage."""
    if VerseSet(verse_range.verse_numbers()).issubset(completed):
        return Status.COMPLETE_WAITING_RECHECK
    return Status.PROGRESS


def ensure_verses_editable(record):
    if record.status != Status.PROGRESS:
        logger.warning("Rejected verse edit on hafalan record %s (%s)", record.pk, record.status)
        raise RecordAlreadyFinalized(record.pk, record.status)


def ensure_recheck_pending(record):
    if record.status != Status.COMPLETE_WAITING_RECHECK:
        raise NoRecheckPending(record.pk, record.status)


# ---- lookups ----

def find_open_record(student_id, kaca_id, lock=False):
    qs = HafalanRecord.objects.filter(
        student_id=student_id, kaca_id=kaca_id, status__in=HafalanRecord.OPEN_STATUSES,
    )
    if lock:
        qs = qs.select_for_update()
    found = list(qs[:2])
    if len(found) > 1:
        ids = list(
            HafalanRecord.objects.filter(
                student_id=student_id, kaca_id=kaca_id, status__in=HafalanRecord.OPEN_STATUSES,
            ).values_list("pk", flat=True)
        )
        logger.error("Duplicate open hafalan records for student %s kaca %s: %s", student_id, kaca_id, ids)
        raise DuplicateOpenRecord(student_id, kaca_id, ids)
    return found[0] if found else None


def find_passed_record(student_id, kaca_id):
    return (
        HafalanRecord.objects
        .filter(student_id=student_id, kaca_id=kaca_id, status=Status.RECHECK_PASSED)
        .order_by("-submitted_at", "-id")
        .first()
    )


def get_record(record_id, lock=False):
    qs = HafalanRecord.objects.select_related("kaca")
    if lock:
        qs = qs.select_for_update()
    return qs.get(pk=record_id)


def list_records(student_id=None, teacher_id=None, kaca_id=None, status=None):
    qs = HafalanRecord.objects.select_related("kaca", "student__user", "teacher__user")
    if student_id is not None:
        qs = qs.filter(student_id=student_id)
    if teacher_id is not None:
        qs = qs.filter(teacher_id=teacher_id)
    if kaca_id is not None:
        qs = qs.filter(kaca_id=kaca_id)
    if status is not None:
        qs = qs.filter(status=Status(status))
    return qs


def progress_summary(student_id):
    """Record counts per status plus the number of verses recorded as memorized."""
    records = HafalanRecord.objects.filter(student_id=student_id)
    counts = {s.value: 0 for s in Status}
    for row in records.order_by().values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]
    return {
        "by_status": counts,
        "pages_total": sum(counts.values()),
        "verses_completed": sum(len(r.completed_verses) for r in records.only("completed_verses")),
    }


# ---- explicit mutations outside the verse/recheck flow ----

@atomic_operation()
def reassign_teacher(record_id, new_teacher_id, acting_teacher_id):
    """The only way a record's current teacher changes."""
    record = get_record(record_id, lock=True)
    if record.teacher_id == new_teacher_id:
        return record
    previous = record.teacher_id
    record.teacher_id = new_teacher_id
    record.save(update_fields=["teacher", "updated_at"])
    history.append(record, acting_teacher_id, history.Action.TEACHER_REASSIGNED)
    logger.info("Hafalan record %s reassigned from teacher %s to %s by %s",
                record.pk, previous, new_teacher_id, acting_teacher_id)
    return record


@atomic_operation()
def update_notes(record_id, teacher_id, notes):
    record = get_record(record_id, lock=True)
    notes = notes or None
    if record.notes == notes:
        return record
    record.notes = notes
    record.save(update_fields=["notes", "updated_at"])
    history.append(record, teacher_id, history.Action.NOTES_UPDATED)
    return record
