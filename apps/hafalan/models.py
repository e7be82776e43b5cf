import logging

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import Profile
from apps.quran.models import Kaca

from .exceptions import AppendOnlyViolation
from .verses import VerseSet, VerseSetField

logger = logging.getLogger(__name__)

# ==============================================================================
# سجل الحفظ لكل (طالب، صفحة)
# ==============================================================================


class HafalanRecord(models.Model):
    """تقدّم الطالب في حفظ صفحة واحدة، من أول آية حتى اجتياز المراجعة."""

    class Status(models.TextChoices):
        PROGRESS = "PROGRESS", "Sedang hafalan"
        COMPLETE_WAITING_RECHECK = "COMPLETE_WAITING_RECHECK", "Menunggu recheck"
        RECHECK_PASSED = "RECHECK_PASSED", "Lulus recheck"

    OPEN_STATUSES = (Status.PROGRESS, Status.COMPLETE_WAITING_RECHECK)

    student = models.ForeignKey(
        Profile,
        on_delete=models.PROTECT,
        related_name="hafalan_records",
        limit_choices_to={"role": Profile.ROLE_STUDENT},
    )
    teacher = models.ForeignKey(
        Profile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_hafalan_records",
        limit_choices_to={"role": Profile.ROLE_TEACHER},
    )
    kaca = models.ForeignKey(Kaca, on_delete=models.PROTECT, related_name="hafalan_records")
    completed_verses = VerseSetField(default=VerseSet)
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.PROGRESS)
    notes = models.TextField(null=True, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-submitted_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "kaca"],
                condition=Q(status__in=["PROGRESS", "COMPLETE_WAITING_RECHECK"]),
                name="unique_open_hafalan_per_kaca",
            ),
        ]

    def __str__(self):
        return f"{self.student} – kaca {self.kaca.page_number} ({self.status})"

    def clean(self):
        if self.kaca_id and self.completed_verses:
            outside = [v for v in self.completed_verses if not self.kaca.contains(v)]
            if outside:
                raise ValidationError({"completed_verses": f"Ayat {outside} di luar kaca ini."})

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    @property
    def is_passed(self):
        return self.status == self.Status.RECHECK_PASSED


# ==============================================================================
# جولات المراجعة (append-only)
# ==============================================================================


class AppendOnlyModel(models.Model):
    """Rows are written once; later saves are refused."""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            logger.error("Refused update of append-only %s %s", self.__class__.__name__, self.pk)
            raise AppendOnlyViolation(self.__class__.__name__, self.pk)
        return super().save(*args, **kwargs)


class RecheckRecord(AppendOnlyModel):
    """جولة مراجعة واحدة على سجل حفظ."""
    hafalan_record = models.ForeignKey(HafalanRecord, on_delete=models.CASCADE, related_name="rechecks")
    round_number = models.PositiveIntegerField()
    rechecked_at = models.DateTimeField(default=timezone.now)
    rechecked_by = models.ForeignKey(
        Profile,
        on_delete=models.PROTECT,
        related_name="rechecks_done",
        limit_choices_to={"role": Profile.ROLE_TEACHER},
    )
    scope = VerseSetField(default=VerseSet)
    failed_verses = VerseSetField(default=VerseSet)
    all_passed = models.BooleanField(default=False)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        ordering = ["hafalan_record", "round_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["hafalan_record", "round_number"],
                name="unique_recheck_round",
            ),
        ]

    def __str__(self):
        result = "lulus" if self.all_passed else f"ulang {self.failed_verses}"
        return f"Recheck #{self.round_number} on {self.hafalan_record_id}: {result}"


# ==============================================================================
# سجل التاريخ (append-only)
# ==============================================================================


class HafalanHistory(AppendOnlyModel):
    """لقطة من حالة سجل الحفظ بعد كل تعديل، مع المعلّم الذي قام به."""

    class Action(models.TextChoices):
        VERSES_ADDED = "VERSES_ADDED", "Verses added"
        RECHECK_SUBMITTED = "RECHECK_SUBMITTED", "Recheck submitted"
        NOTES_UPDATED = "NOTES_UPDATED", "Notes updated"
        TEACHER_REASSIGNED = "TEACHER_REASSIGNED", "Teacher reassigned"
        PARTIAL_PROMOTED = "PARTIAL_PROMOTED", "Partial hafalan promoted"

    hafalan_record = models.ForeignKey(HafalanRecord, on_delete=models.CASCADE, related_name="history")
    teacher = models.ForeignKey(Profile, on_delete=models.PROTECT, related_name="hafalan_history")
    occurred_at = models.DateTimeField(default=timezone.now)
    action = models.CharField(max_length=32, choices=Action.choices)
    completed_verses_snapshot = VerseSetField(default=VerseSet)
    status_snapshot = models.CharField(max_length=32, choices=HafalanRecord.Status.choices)
    note_snapshot = models.TextField(null=True, blank=True)

    class Meta:
        ordering = ["occurred_at", "id"]
        verbose_name_plural = "hafalan history"

    def __str__(self):
        return f"{self.occurred_at:%Y-%m-%d %H:%M} {self.action} by {self.teacher}"


# ==============================================================================
# الحفظ الجزئي لآية واحدة
# ==============================================================================


class PartialHafalan(models.Model):
    """تقدّم جزئي في آية واحدة قبل اكتمالها."""

    class Status(models.TextChoices):
        IN_PROGRESS = "IN_PROGRESS", "Sedang berjalan"
        COMPLETED = "COMPLETED", "Selesai"
        CANCELLED = "CANCELLED", "Dibatalkan"

    student = models.ForeignKey(
        Profile,
        on_delete=models.PROTECT,
        related_name="partial_hafalan",
        limit_choices_to={"role": Profile.ROLE_STUDENT},
    )
    teacher = models.ForeignKey(
        Profile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="partial_hafalan_supervised",
        limit_choices_to={"role": Profile.ROLE_TEACHER},
    )
    kaca = models.ForeignKey(Kaca, on_delete=models.PROTECT, related_name="partial_hafalan")
    verse_number = models.PositiveSmallIntegerField()
    progress_note = models.CharField(max_length=500)
    percentage = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(99)],
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.IN_PROGRESS)
    # مرجع غير مالك: لا يتم مسحه أبدًا بعد الترقية
    linked_record = models.ForeignKey(
        HafalanRecord,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="promoted_partials",
    )
    started_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-started_at", "-id"]
        verbose_name_plural = "partial hafalan"
        constraints = [
            models.UniqueConstraint(
                fields=["student", "kaca", "verse_number"],
                condition=Q(status="IN_PROGRESS"),
                name="unique_active_partial_per_verse",
            ),
            models.CheckConstraint(
                condition=Q(percentage__gte=1) & Q(percentage__lte=99),
                name="partial_percentage_1_99",
            ),
        ]

    def __str__(self):
        return f"{self.student} – kaca {self.kaca.page_number} ayat {self.verse_number} ({self.percentage}%)"

    def clean(self):
        if self.kaca_id and self.verse_number and not self.kaca.contains(self.verse_number):
            raise ValidationError({"verse_number": "Ayat di luar kaca ini."})

    @property
    def is_active(self):
        return self.status == self.Status.IN_PROGRESS
