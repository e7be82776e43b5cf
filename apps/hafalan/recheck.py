"""
Recheck engine.

A record waiting for recheck is tested in rounds. Round 1 presents the whole
kaca; every later round presents only the verses that failed the round
before it. A round with no failures passes the record. Verses already
recorded as memorized are never removed by a failed round.
"""
import logging

from django.db.models import Max

from apps.quran.roster import get_verse_range

from . import history, records
from .exceptions import InvalidRecheckScope
from .models import HafalanRecord, RecheckRecord
from .transactions import atomic_operation
from .verses import VerseSet

logger = logging.getLogger(__name__)


def current_scope(record):
    """Verses the next round will present; empty once the record has passed."""
    if record.is_passed:
        return VerseSet()
    last = record.rechecks.order_by("-round_number").first()
    if last is None:
        verse_range = get_verse_range(record.kaca_id)
        return VerseSet(verse_range.verse_numbers())
    return last.failed_verses


def list_rounds(record_id):
    return list(
        RecheckRecord.objects
        .filter(hafalan_record_id=record_id)
        .select_related("rechecked_by__user")
        .order_by("round_number")
    )


def _next_round_number(record):
    last = record.rechecks.aggregate(n=Max("round_number"))["n"]
    return (last or 0) + 1


def _check_in_scope(verses, scope):
    unexpected = [v for v in verses if isinstance(v, bool) or not isinstance(v, int) or v not in scope]
    if unexpected:
        raise InvalidRecheckScope(unexpected, scope)


def _record_round(record, teacher_id, scope, passed, notes):
    failed = scope - passed
    all_passed = not failed

    round_ = RecheckRecord.objects.create(
        hafalan_record=record,
        round_number=_next_round_number(record),
        rechecked_by_id=teacher_id,
        scope=scope,
        failed_verses=failed,
        all_passed=all_passed,
        notes=notes or None,
    )
    target = HafalanRecord.Status.RECHECK_PASSED if all_passed else HafalanRecord.Status.COMPLETE_WAITING_RECHECK
    records.transition(record, target)
    record.save(update_fields=["status", "updated_at"])
    history.append(record, teacher_id, history.Action.RECHECK_SUBMITTED)

    if all_passed:
        logger.info("Hafalan record %s passed recheck in round %s", record.pk, round_.round_number)
    else:
        logger.info("Hafalan record %s round %s: ayat %s to repeat",
                    record.pk, round_.round_number, failed)
    return round_


@atomic_operation()
def submit_recheck(record_id, teacher_id, passed_verses, notes=None):
    """
    Record one recheck round given the verses the student recited correctly.

    Not retried on conflict: two teachers submitting the same round is
    something a person has to sort out.
    """
    record = records.get_record(record_id, lock=True)
    records.ensure_recheck_pending(record)
    scope = current_scope(record)
    passed_verses = list(passed_verses)
    _check_in_scope(passed_verses, scope)
    return _record_round(record, teacher_id, scope, VerseSet(passed_verses), notes)


@atomic_operation()
def submit_recheck_failures(record_id, teacher_id, failed_verses, notes=None):
    """Same as ``submit_recheck``, but given the verses that need repeating."""
    record = records.get_record(record_id, lock=True)
    records.ensure_recheck_pending(record)
    scope = current_scope(record)
    failed_verses = list(failed_verses)
    _check_in_scope(failed_verses, scope)
    return _record_round(record, teacher_id, scope, scope - failed_verses, notes)
