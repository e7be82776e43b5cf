"""
Errors raised by the hafalan engine.

Every error is local and recoverable; callers (the JSON views, the admin,
management commands) decide how to present them. ``code`` is stable and is
what API clients should match on.
"""


class HafalanError(Exception):
    code = "hafalan_error"
    status = 400

    def __init__(self, message=None, **context):
        self.context = context
        super().__init__(message or self.default_message())

    def default_message(self):
        return self.__class__.__name__

    @property
    def message(self):
        return str(self)


class OutOfRangeVerse(HafalanError):
    code = "out_of_range_verse"

    def __init__(self, verse_number, verse_start, verse_end):
        super().__init__(
            f"Ayat {verse_number} is outside this kaca ({verse_start}-{verse_end}).",
            verse_number=verse_number, verse_start=verse_start, verse_end=verse_end,
        )


class EmptyVerseSubmission(HafalanError):
    code = "empty_verse_submission"

    def default_message(self):
        return "At least one ayat must be submitted."


class RecordAlreadyFinalized(HafalanError):
    code = "record_already_finalized"
    status = 409

    def __init__(self, record_id, status):
        super().__init__(
            f"Hafalan record {record_id} is {status}; its verses can no longer be edited directly.",
            record_id=record_id, record_status=status,
        )


class NoRecheckPending(HafalanError):
    code = "no_recheck_pending"
    status = 409

    def __init__(self, record_id, status):
        super().__init__(
            f"Hafalan record {record_id} is {status}, not waiting for a recheck.",
            record_id=record_id, record_status=status,
        )


class InvalidRecheckScope(HafalanError):
    code = "invalid_recheck_scope"

    def __init__(self, unexpected, scope):
        super().__init__(
            f"Ayat {list(unexpected)} were not presented in this round (scope: {scope.to_list()}).",
            unexpected=list(unexpected), scope=scope.to_list(),
        )


class InvalidStatusTransition(HafalanError):
    code = "invalid_status_transition"
    status = 409

    def __init__(self, current, target):
        super().__init__(
            f"Cannot move a hafalan record from {current} to {target}.",
            current=current, target=target,
        )


class DuplicateOpenRecord(HafalanError):
    """More than one open record for a (student, kaca) pair: a data-integrity fault."""
    code = "duplicate_open_record"
    status = 500

    def __init__(self, student_id, kaca_id, record_ids):
        super().__init__(
            f"Found {len(record_ids)} open hafalan records for student {student_id} on kaca {kaca_id}.",
            student_id=student_id, kaca_id=kaca_id, record_ids=list(record_ids),
        )


class ConcurrentModification(HafalanError):
    code = "concurrent_modification"
    status = 409

    def default_message(self):
        return "The record was changed by someone else at the same time. Reload and try again."


class InvalidPercentage(HafalanError):
    code = "invalid_percentage"

    def __init__(self, percentage):
        super().__init__(
            f"Partial percentage must be between 1 and 99, got {percentage}.",
            percentage=percentage,
        )


class InvalidProgressNote(HafalanError):
    code = "invalid_progress_note"

    def __init__(self, max_length):
        super().__init__(
            f"Progress note is required and must be at most {max_length} characters.",
            max_length=max_length,
        )


class PartialAlreadyActive(HafalanError):
    code = "partial_already_active"
    status = 409

    def __init__(self, existing_id, verse_number):
        super().__init__(
            f"Ayat {verse_number} already has an active partial hafalan ({existing_id}).",
            existing_id=existing_id, verse_number=verse_number,
        )


class PartialNotActive(HafalanError):
    code = "partial_not_active"
    status = 409

    def __init__(self, partial_id, status):
        super().__init__(
            f"Partial hafalan {partial_id} is {status} and can no longer change.",
            partial_id=partial_id, partial_status=status,
        )


class VerseAlreadyCompleted(HafalanError):
    code = "verse_already_completed"
    status = 409

    def __init__(self, verse_number, record_id):
        super().__init__(
            f"Ayat {verse_number} is already memorized in hafalan record {record_id}.",
            verse_number=verse_number, record_id=record_id,
        )


class AppendOnlyViolation(HafalanError):
    code = "append_only_violation"
    status = 500

    def __init__(self, model_name, pk):
        super().__init__(
            f"{model_name} {pk} is append-only and cannot be modified.",
            model=model_name, pk=pk,
        )
