import pytest
from django.contrib.auth.models import User

from apps.accounts.models import Profile
from apps.quran.models import Kaca


def make_profile(username, role=Profile.ROLE_STUDENT, **extra):
    user = User.objects.create_user(username=username, password="bismillah-123")
    profile = Profile.objects.get(user=user)
    profile.role = role
    for key, value in extra.items():
        setattr(profile, key, value)
    profile.save()
    return profile


@pytest.fixture
def teacher(db):
    return make_profile("ustadz_ahmad", Profile.ROLE_TEACHER)


@pytest.fixture
def other_teacher(db):
    return make_profile("ustadzah_fatimah", Profile.ROLE_TEACHER)


@pytest.fixture
def student(db):
    return make_profile("santri_umar", student_no="S-001")


@pytest.fixture
def kaca(db):
    """Al-Fatihah, seven verses on one page."""
    return Kaca.objects.create(
        page_number=1, surah_number=1, surah_name="Al-Fatihah", ayat_start=1, ayat_end=7, juz=1,
    )


@pytest.fixture
def kaca_baqarah(db):
    return Kaca.objects.create(
        page_number=3, surah_number=2, surah_name="Al-Baqarah", ayat_start=6, ayat_end=16, juz=1,
    )
