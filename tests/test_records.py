import itertools
from unittest import mock

import pytest
from django.core.exceptions import ValidationError

from apps.hafalan import records
from apps.hafalan.ayat import mark_verse_complete, mark_verses_complete
from apps.hafalan.exceptions import (
    DuplicateOpenRecord,
    InvalidStatusTransition,
    NoRecheckPending,
    RecordAlreadyFinalized,
)
from apps.hafalan.models import HafalanHistory, HafalanRecord
from apps.hafalan.recheck import submit_recheck
from apps.hafalan.verses import VerseSet
from apps.quran.roster import VerseRange

Status = HafalanRecord.Status

ALLOWED = {
    (Status.PROGRESS, Status.PROGRESS),
    (Status.PROGRESS, Status.COMPLETE_WAITING_RECHECK),
    (Status.COMPLETE_WAITING_RECHECK, Status.COMPLETE_WAITING_RECHECK),
    (Status.COMPLETE_WAITING_RECHECK, Status.RECHECK_PASSED),
}


@pytest.mark.parametrize("current,target", list(itertools.product(Status, Status)))
def test_transition_table_is_exhaustive(current, target):
    record = HafalanRecord(status=current)
    if (current, target) in ALLOWED:
        records.transition(record, target)
        assert record.status == target
    else:
        with pytest.raises(InvalidStatusTransition):
            records.transition(record, target)
        assert record.status == current


def test_every_status_has_a_row():
    assert set(records.TRANSITIONS) == set(Status)
    assert records.TRANSITIONS[Status.RECHECK_PASSED] == frozenset()


def test_status_for_coverage():
    page = VerseRange(kaca_id=1, page_number=3, unit_name="Al-Baqarah", verse_start=6, verse_end=8, juz_number=1)
    assert records.status_for_coverage(VerseSet([6, 7]), page) == Status.PROGRESS
    assert records.status_for_coverage(VerseSet([8, 6, 7]), page) == Status.COMPLETE_WAITING_RECHECK


def test_guards():
    records.ensure_verses_editable(HafalanRecord(status=Status.PROGRESS))
    with pytest.raises(RecordAlreadyFinalized):
        records.ensure_verses_editable(HafalanRecord(status=Status.COMPLETE_WAITING_RECHECK))
    records.ensure_recheck_pending(HafalanRecord(status=Status.COMPLETE_WAITING_RECHECK))
    for status in (Status.PROGRESS, Status.RECHECK_PASSED):
        with pytest.raises(NoRecheckPending):
            records.ensure_recheck_pending(HafalanRecord(status=status))


@pytest.mark.django_db
def test_find_open_and_passed_records(student, teacher, kaca):
    assert records.find_open_record(student.pk, kaca.pk) is None

    record = mark_verses_complete(student.pk, kaca.pk, range(1, 8), teacher.pk)
    assert records.find_open_record(student.pk, kaca.pk).pk == record.pk
    assert records.find_passed_record(student.pk, kaca.pk) is None

    submit_recheck(record.pk, teacher.pk, range(1, 8))
    assert records.find_open_record(student.pk, kaca.pk) is None
    assert records.find_passed_record(student.pk, kaca.pk).pk == record.pk


@pytest.mark.django_db
def test_reassign_teacher_is_recorded(student, teacher, other_teacher, kaca):
    record = mark_verse_complete(student.pk, kaca.pk, 1, teacher.pk)

    updated = records.reassign_teacher(record.pk, other_teacher.pk, teacher.pk)

    assert updated.teacher_id == other_teacher.pk
    entry = record.history.last()
    assert entry.action == HafalanHistory.Action.TEACHER_REASSIGNED
    assert entry.teacher_id == teacher.pk


@pytest.mark.django_db
def test_reassign_to_current_teacher_is_a_no_op(student, teacher, kaca):
    record = mark_verse_complete(student.pk, kaca.pk, 1, teacher.pk)
    records.reassign_teacher(record.pk, teacher.pk, teacher.pk)
    assert record.history.count() == 1


@pytest.mark.django_db
def test_notes_can_change_in_any_status(student, teacher, kaca):
    record = mark_verses_complete(student.pk, kaca.pk, range(1, 8), teacher.pk)
    submit_recheck(record.pk, teacher.pk, range(1, 8))

    updated = records.update_notes(record.pk, teacher.pk, "Mutqin, lanjut kaca 2")

    assert updated.status == Status.RECHECK_PASSED
    assert updated.notes == "Mutqin, lanjut kaca 2"
    entry = record.history.last()
    assert entry.action == HafalanHistory.Action.NOTES_UPDATED
    assert entry.note_snapshot == "Mutqin, lanjut kaca 2"
    assert entry.completed_verses_snapshot == set(range(1, 8))

    records.update_notes(record.pk, teacher.pk, "Mutqin, lanjut kaca 2")
    assert record.history.count() == 3


@pytest.mark.django_db
def test_list_records_and_summary(student, teacher, other_teacher, kaca, kaca_baqarah):
    a = mark_verses_complete(student.pk, kaca.pk, range(1, 8), teacher.pk)
    b = mark_verses_complete(student.pk, kaca_baqarah.pk, [6, 7, 8], other_teacher.pk)

    assert list(records.list_records(student_id=student.pk).order_by("id")) == [a, b]
    assert list(records.list_records(teacher_id=other_teacher.pk)) == [b]
    assert list(records.list_records(status=Status.COMPLETE_WAITING_RECHECK)) == [a]
    assert list(records.list_records(kaca_id=kaca_baqarah.pk)) == [b]

    summary = records.progress_summary(student.pk)
    assert summary["pages_total"] == 2
    assert summary["verses_completed"] == 10
    assert summary["by_status"] == {
        "PROGRESS": 1,
        "COMPLETE_WAITING_RECHECK": 1,
        "RECHECK_PASSED": 0,
    }


@pytest.mark.django_db
def test_model_clean_rejects_verses_outside_the_page(kaca):
    HafalanRecord(kaca=kaca, completed_verses=VerseSet([1, 7])).clean()
    with pytest.raises(ValidationError):
        HafalanRecord(kaca=kaca, completed_verses=VerseSet([7, 8])).clean()


@pytest.mark.django_db
def test_two_open_records_for_one_page_are_reported(student, teacher, kaca):
    first = HafalanRecord.objects.create(
        student=student, teacher=teacher, kaca=kaca, completed_verses=VerseSet([1]),
    )
    second = HafalanRecord.objects.create(
        student=student, teacher=teacher, kaca=kaca,
        completed_verses=VerseSet(range(1, 8)), status=Status.RECHECK_PASSED,
    )

    # widen the open statuses so the passed row counts as a second open record
    with mock.patch.object(HafalanRecord, "OPEN_STATUSES", tuple(Status)), \
            mock.patch.object(records.logger, "error") as log_error:
        with pytest.raises(DuplicateOpenRecord) as exc:
            records.find_open_record(student.pk, kaca.pk)

    assert sorted(exc.value.context["record_ids"]) == [first.pk, second.pk]
    assert exc.value.status == 500
    log_error.assert_called_once()
