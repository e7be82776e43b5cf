"""
Ayat status tracker: records verses a student has memorized on a kaca.

Marking is a set union on the open record for (student, kaca), so replaying
the same call is harmless and store conflicts are retried.
"""
import logging

from apps.quran.roster import get_verse_range

from . import history, records
from .exceptions import EmptyVerseSubmission, OutOfRangeVerse, RecordAlreadyFinalized
from .models import HafalanRecord
from .transactions import atomic_operation
from .verses import VerseSet

logger = logging.getLogger(__name__)


def apply_verses(student_id, kaca_id, verse_numbers, teacher_id, notes=None,
                 action=history.Action.VERSES_ADDED):
    """
    Add ``verse_numbers`` to the student's open record on ``kaca_id``.

    Must run inside a transaction; the public entry points below and
    ``partial.complete_partial`` provide one.
    """
    verse_numbers = list(verse_numbers)
    if not verse_numbers:
        raise EmptyVerseSubmission()

    verse_range = get_verse_range(kaca_id)
    for v in verse_numbers:
        if v not in verse_range:
            raise OutOfRangeVerse(v, verse_range.verse_start, verse_range.verse_end)
    incoming = VerseSet(verse_numbers)

    record = records.find_open_record(student_id, kaca_id, lock=True)
    if record is None:
        passed = records.find_passed_record(student_id, kaca_id)
        if passed is not None:
            logger.warning("Rejected verse edit on passed hafalan record %s", passed.pk)
            raise RecordAlreadyFinalized(passed.pk, passed.status)
        record = HafalanRecord(
            student_id=student_id,
            teacher_id=teacher_id,
            kaca_id=kaca_id,
            completed_verses=incoming,
            notes=notes or None,
        )
        records.transition(record, records.status_for_coverage(incoming, verse_range))
        record.save()
        logger.info("Opened hafalan record %s for student %s on kaca %s (%s)",
                    record.pk, student_id, verse_range.page_number, record.status)
        history.append(record, teacher_id, action)
        return record

    records.ensure_verses_editable(record)

    merged = record.completed_verses | incoming
    verses_changed = merged != record.completed_verses
    notes_changed = notes is not None and (notes or None) != record.notes
    if not verses_changed and not notes_changed:
        return record

    record.completed_verses = merged
    if notes_changed:
        record.notes = notes or None
    records.transition(record, records.status_for_coverage(merged, verse_range))
    record.save()
    history.append(record, teacher_id, action if verses_changed else history.Action.NOTES_UPDATED)
    return record


@atomic_operation(retry_on_conflict=True)
def mark_verse_complete(student_id, kaca_id, verse_number, teacher_id, notes=None):
    return apply_verses(student_id, kaca_id, [verse_number], teacher_id, notes=notes)


@atomic_operation(retry_on_conflict=True)
def mark_verses_complete(student_id, kaca_id, verse_numbers, teacher_id, notes=None):
    """Apply a whole batch as one mutation with a single history entry."""
    return apply_verses(student_id, kaca_id, verse_numbers, teacher_id, notes=notes)
