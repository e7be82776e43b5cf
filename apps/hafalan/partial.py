"""
Partial hafalan: progress on a single verse that is not memorized yet.

A partial lives beside the page record. Completing it promotes the verse
into the record through the ayat tracker; cancelling it leaves the record
alone.
"""
import logging

from django.utils import timezone

from apps.quran.roster import get_verse_range

from . import ayat, conf, history, records
from .exceptions import (
    InvalidPercentage,
    InvalidProgressNote,
    OutOfRangeVerse,
    PartialAlreadyActive,
    PartialNotActive,
    VerseAlreadyCompleted,
)
from .models import PartialHafalan
from .transactions import atomic_operation

logger = logging.getLogger(__name__)

Status = PartialHafalan.Status


def validate_percentage(percentage):
    if isinstance(percentage, bool) or not isinstance(percentage, int) or not 1 <= percentage <= 99:
        raise InvalidPercentage(percentage)
    return percentage


def validate_progress_note(note):
    max_length = conf.get("HAFALAN_PROGRESS_NOTE_MAX_LENGTH")
    note = (note or "").strip()
    if not note or len(note) > max_length:
        raise InvalidProgressNote(max_length)
    return note


def _get_partial(partial_id, lock=False):
    qs = PartialHafalan.objects.all()
    if lock:
        qs = qs.select_for_update()
    return qs.get(pk=partial_id)


def _ensure_active(partial):
    if not partial.is_active:
        raise PartialNotActive(partial.pk, partial.status)


@atomic_operation()
def create_partial(student_id, kaca_id, verse_number, teacher_id, progress_note, percentage):
    verse_range = get_verse_range(kaca_id)
    if verse_number not in verse_range:
        raise OutOfRangeVerse(verse_number, verse_range.verse_start, verse_range.verse_end)
    percentage = validate_percentage(percentage)
    progress_note = validate_progress_note(progress_note)

    existing = (
        PartialHafalan.objects
        .filter(student_id=student_id, kaca_id=kaca_id, verse_number=verse_number, status=Status.IN_PROGRESS)
        .first()
    )
    if existing is not None:
        raise PartialAlreadyActive(existing.pk, verse_number)

    record = records.find_open_record(student_id, kaca_id) or records.find_passed_record(student_id, kaca_id)
    if record is not None and verse_number in record.completed_verses:
        raise VerseAlreadyCompleted(verse_number, record.pk)

    return PartialHafalan.objects.create(
        student_id=student_id,
        teacher_id=teacher_id,
        kaca_id=kaca_id,
        verse_number=verse_number,
        progress_note=progress_note,
        percentage=percentage,
    )


@atomic_operation()
def update_partial(partial_id, progress_note=None, percentage=None):
    partial = _get_partial(partial_id, lock=True)
    _ensure_active(partial)
    fields = []
    if progress_note is not None:
        partial.progress_note = validate_progress_note(progress_note)
        fields.append("progress_note")
    if percentage is not None:
        partial.percentage = validate_percentage(percentage)
        fields.append("percentage")
    if fields:
        partial.save(update_fields=fields + ["updated_at"])
    return partial


@atomic_operation()
def complete_partial(partial_id, teacher_id):
    """
    Promote the verse into the student's page record and close the partial.

    Both writes share one transaction: if the record refuses the verse
    (e.g. it is already waiting for recheck) the partial stays IN_PROGRESS.
    The percentage keeps its last value.
    """
    partial = _get_partial(partial_id, lock=True)
    _ensure_active(partial)
    record = ayat.apply_verses(
        partial.student_id,
        partial.kaca_id,
        [partial.verse_number],
        teacher_id,
        action=history.Action.PARTIAL_PROMOTED,
    )
    partial.status = Status.COMPLETED
    partial.linked_record = record
    partial.closed_at = timezone.now()
    partial.save(update_fields=["status", "linked_record", "closed_at", "updated_at"])
    logger.info("Partial hafalan %s promoted into record %s", partial.pk, record.pk)
    return partial, record


@atomic_operation()
def cancel_partial(partial_id):
    partial = _get_partial(partial_id, lock=True)
    _ensure_active(partial)
    partial.status = Status.CANCELLED
    partial.closed_at = timezone.now()
    partial.save(update_fields=["status", "closed_at", "updated_at"])
    logger.info("Partial hafalan %s cancelled", partial.pk)
    return partial


def list_partials(student_id=None, kaca_id=None, status=None):
    qs = PartialHafalan.objects.select_related("kaca", "student__user", "teacher__user", "linked_record")
    if student_id is not None:
        qs = qs.filter(student_id=student_id)
    if kaca_id is not None:
        qs = qs.filter(kaca_id=kaca_id)
    if status is not None:
        qs = qs.filter(status=Status(status))
    return qs
