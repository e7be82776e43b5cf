from django.conf import settings

DEFAULTS = {
    "HAFALAN_CONFLICT_RETRIES": 1,
    "HAFALAN_NOTE_MAX_LENGTH": 1000,
    "HAFALAN_PROGRESS_NOTE_MAX_LENGTH": 500,
}


def get(name):
    return getattr(settings, name, DEFAULTS[name])
