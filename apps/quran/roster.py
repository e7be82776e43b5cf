"""
Verse roster: read-only lookup of a page's verse range.

The hafalan engine only ever asks the roster one question (which verses does
this kaca span?), so the answer is returned as a small immutable value rather
than the model instance.
"""
from dataclasses import dataclass

from .models import Kaca


class UnknownPage(LookupError):
    code = "unknown_page"

    def __init__(self, kaca_id):
        self.kaca_id = kaca_id
        super().__init__(f"Kaca {kaca_id} is not in the roster.")


@dataclass(frozen=True)
class VerseRange:
    kaca_id: int
    page_number: int
    unit_name: str
    verse_start: int
    verse_end: int
    juz_number: int

    def __contains__(self, verse_number):
        if isinstance(verse_number, bool) or not isinstance(verse_number, int):
            return False
        return self.verse_start <= verse_number <= self.verse_end

    def __len__(self):
        return self.verse_end - self.verse_start + 1

    def verse_numbers(self):
        return range(self.verse_start, self.verse_end + 1)

    @classmethod
    def from_kaca(cls, kaca):
        return cls(
            kaca_id=kaca.pk,
            page_number=kaca.page_number,
            unit_name=kaca.surah_name,
            verse_start=kaca.ayat_start,
            verse_end=kaca.ayat_end,
            juz_number=kaca.juz,
        )


def get_verse_range(kaca_id) -> VerseRange:
    try:
        kaca = Kaca.objects.get(pk=kaca_id)
    except Kaca.DoesNotExist:
        raise UnknownPage(kaca_id) from None
    return VerseRange.from_kaca(kaca)
