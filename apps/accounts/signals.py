# apps/accounts/signals.py
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from .models import Profile

User = get_user_model()


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """
    إنشاء Profile لمرة واحدة عند إنشاء User جديد.
    الدور الافتراضي طالب؛ حسابات المعلّمين يتم ضبطها بعد الإنشاء.
    """
    if created:
        Profile.objects.get_or_create(user=instance)
