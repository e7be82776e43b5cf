from django.db import models
from django.db.models import F, Q


class Kaca(models.Model):
    """صفحة من المصحف (kaca) بنطاق آيات متصل داخل سورة."""
    page_number = models.PositiveSmallIntegerField(unique=True)
    surah_number = models.PositiveSmallIntegerField()
    surah_name = models.CharField(max_length=64)
    ayat_start = models.PositiveSmallIntegerField()
    ayat_end = models.PositiveSmallIntegerField()
    juz = models.PositiveSmallIntegerField()
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["page_number"]
        verbose_name_plural = "kaca"
        constraints = [
            models.CheckConstraint(
                condition=Q(ayat_start__gte=1) & Q(ayat_end__gte=F("ayat_start")),
                name="kaca_valid_ayat_range",
            ),
        ]

    def __str__(self):
        return f"Kaca {self.page_number} – {self.surah_name} {self.ayat_start}-{self.ayat_end}"

    @property
    def verse_count(self):
        return self.ayat_end - self.ayat_start + 1

    def contains(self, verse_number):
        return self.ayat_start <= verse_number <= self.ayat_end
