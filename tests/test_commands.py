import json
from datetime import date
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.hafalan import recheck
from apps.hafalan.ayat import mark_verses_complete
from apps.hafalan.management.commands.hafalan_history import hijri_label
from apps.quran.management.commands.load_kaca import consolidate
from apps.quran.models import Kaca
from apps.quran.roster import UnknownPage, get_verse_range

pytestmark = pytest.mark.django_db


def run(*args):
    out = StringIO()
    call_command(*args, stdout=out)
    return out.getvalue()


def test_load_bundled_roster():
    output = run("load_kaca")
    assert "Created 41" in output
    assert Kaca.objects.count() == 41

    fatihah = Kaca.objects.get(page_number=1)
    assert (fatihah.surah_name, fatihah.ayat_start, fatihah.ayat_end) == ("Al-Fatihah", 1, 7)


def test_reloading_updates_in_place(kaca):
    output = run("load_kaca")
    assert "Updated 1" in output
    kaca.refresh_from_db()
    assert kaca.description == "Al-Fatihah 1-7"


def test_pages_shared_by_two_surahs_are_consolidated(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps([
        {"pageNumber": 604, "surahNumber": 112, "surahName": "Al-Ikhlas", "ayatStart": 1, "ayatEnd": 4, "juz": 30},
        {"pageNumber": 604, "surahNumber": 113, "surahName": "Al-Falaq", "ayatStart": 1, "ayatEnd": 5, "juz": 30},
        {"pageNumber": 604, "surahNumber": 114, "surahName": "An-Nas", "ayatStart": 1, "ayatEnd": 6, "juz": 30},
    ]), encoding="utf-8")

    run("load_kaca", str(path))

    page = Kaca.objects.get()
    assert page.surah_name == "Al-Ikhlas"
    assert page.description == "Al-Ikhlas 1-4, Al-Falaq 1-5, An-Nas 1-6"


def test_consolidate_sorts_pages():
    entries = [
        {"pageNumber": 3, "surahName": "Al-Baqarah", "ayatStart": 6, "ayatEnd": 16},
        {"pageNumber": 2, "surahName": "Al-Baqarah", "ayatStart": 1, "ayatEnd": 5},
    ]
    assert [p["pageNumber"] for p in consolidate(entries)] == [2, 3]


@pytest.mark.parametrize("content,message", [
    ("{}", "JSON list"),
    ("[{\"pageNumber\": 1}]", "missing"),
    (json.dumps([{"pageNumber": 1, "surahNumber": 1, "surahName": "Al-Fatihah",
                  "ayatStart": 7, "ayatEnd": 1, "juz": 1}]), "invalid ayat range"),
    ("not json", "Invalid JSON"),
])
def test_bad_roster_files(tmp_path, content, message):
    path = tmp_path / "roster.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CommandError, match=message):
        run("load_kaca", str(path))
    assert not Kaca.objects.exists()


def test_missing_roster_file(tmp_path):
    with pytest.raises(CommandError, match="File not found"):
        run("load_kaca", str(tmp_path / "nope.json"))


def test_roster_lookup(kaca):
    verse_range = get_verse_range(kaca.pk)
    assert list(verse_range.verse_numbers()) == [1, 2, 3, 4, 5, 6, 7]
    assert 7 in verse_range and 8 not in verse_range
    assert True not in verse_range and "1" not in verse_range
    assert len(verse_range) == 7
    with pytest.raises(UnknownPage):
        get_verse_range(kaca.pk + 1)


def test_hafalan_history_timeline(student, teacher, other_teacher, kaca):
    record = mark_verses_complete(student.pk, kaca.pk, range(1, 8), teacher.pk, notes="lancar")
    recheck.submit_recheck(record.pk, other_teacher.pk, [1, 2, 3])

    output = run("hafalan_history", str(record.pk), "--rounds")

    assert "kaca 1 (Al-Fatihah 1-7)" in output
    assert "VERSES_ADDED" in output
    assert "RECHECK_SUBMITTED" in output
    assert "Round 1" in output and "ulang: 4, 5, 6, 7" in output
    assert "Teachers involved: ustadz_ahmad, ustadzah_fatimah" in output


def test_hafalan_history_unknown_record():
    with pytest.raises(CommandError):
        run("hafalan_history", "999")


def test_hijri_label():
    # 1 Ramadan 1445 in the Umm al-Qura calendar
    label = hijri_label(date(2024, 3, 11))
    assert label.startswith("1 Ram")
    assert label.endswith("1445 H")
