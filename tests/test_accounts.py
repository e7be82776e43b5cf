import pytest
from django.contrib.auth.models import User

from apps.accounts.models import Profile

pytestmark = pytest.mark.django_db


def test_new_users_get_a_student_profile():
    user = User.objects.create_user(username="santri_baru", password="bismillah-123")
    profile = Profile.objects.get(user=user)
    assert profile.is_student and not profile.is_teacher
    assert profile.display_name == "santri_baru"


def test_display_name_prefers_full_name():
    user = User.objects.create_user(username="ustadz", first_name="Ahmad", last_name="Fauzi")
    assert Profile.objects.get(user=user).display_name == "Ahmad Fauzi"


def test_saving_a_user_again_keeps_one_profile():
    user = User.objects.create_user(username="santri_lama")
    user.email = "lama@example.com"
    user.save()
    assert Profile.objects.filter(user=user).count() == 1
