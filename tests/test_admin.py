import pytest
from django.urls import reverse

from apps.hafalan import partial
from apps.hafalan.ayat import mark_verses_complete
from apps.hafalan.models import HafalanRecord, PartialHafalan
from apps.quran.models import Kaca

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def plain_static_storage(settings):
    # the manifest storage needs collectstatic before admin pages render
    settings.STORAGES = {
        **settings.STORAGES,
        "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
    }


def test_closed_partial_is_read_only(admin_client, student, teacher, kaca):
    p = partial.create_partial(student.pk, kaca.pk, 3, teacher.pk, "separuh ayat", 40)
    partial.complete_partial(p.pk, teacher.pk)

    url = reverse("admin:hafalan_partialhafalan_change", args=[p.pk])
    assert admin_client.get(url).status_code == 200
    admin_client.post(url, {"verse_number": 5, "percentage": 10, "progress_note": "diubah"})

    p.refresh_from_db()
    assert p.status == PartialHafalan.Status.COMPLETED
    assert p.verse_number == 3
    assert p.percentage == 40
    assert p.progress_note == "separuh ayat"


def test_record_cannot_be_moved_to_another_page(admin_client, student, teacher, kaca):
    record = mark_verses_complete(student.pk, kaca.pk, range(1, 8), teacher.pk)
    bigger = Kaca.objects.create(
        page_number=2, surah_number=2, surah_name="Al-Baqarah", ayat_start=1, ayat_end=20, juz=1,
    )

    url = reverse("admin:hafalan_hafalanrecord_change", args=[record.pk])
    admin_client.post(url, {
        "student": student.pk,
        "kaca": bigger.pk,
        "teacher": teacher.pk,
        "status": HafalanRecord.Status.PROGRESS,
        "completed_verses": "1,2",
        "rechecks-TOTAL_FORMS": "0",
        "rechecks-INITIAL_FORMS": "0",
        "rechecks-MIN_NUM_FORMS": "0",
        "rechecks-MAX_NUM_FORMS": "1000",
    })

    record.refresh_from_db()
    assert record.kaca_id == kaca.pk
    assert record.student_id == student.pk
    assert record.status == HafalanRecord.Status.COMPLETE_WAITING_RECHECK
    assert record.completed_verses.to_list() == [1, 2, 3, 4, 5, 6, 7]
    assert record.history.count() == 1


@pytest.mark.parametrize("name", ["hafalan_hafalanrecord_add", "hafalan_partialhafalan_add"])
def test_records_and_partials_are_not_added_by_hand(admin_client, name):
    assert admin_client.get(reverse(f"admin:{name}")).status_code == 403
