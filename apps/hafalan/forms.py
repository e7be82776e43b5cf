from django import forms

from apps.accounts.models import Profile

from . import conf
from .models import HafalanRecord


class VerseListField(forms.CharField):
    """Comma or space separated verse numbers, e.g. ``"1, 2, 5"``."""

    def to_python(self, value):
        value = super().to_python(value)
        if not value:
            return []
        verses = []
        for part in value.replace(",", " ").split():
            try:
                verses.append(int(part))
            except ValueError:
                raise forms.ValidationError(f"'{part}' bukan nomor ayat.", code="invalid") from None
        return verses


def _notes_field():
    return forms.CharField(required=False, max_length=conf.get("HAFALAN_NOTE_MAX_LENGTH"), strip=True)


def _students():
    return Profile.objects.filter(role=Profile.ROLE_STUDENT)


class MarkVersesForm(forms.Form):
    student = forms.ModelChoiceField(queryset=_students())
    kaca = forms.IntegerField(min_value=1)
    verses = VerseListField()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["notes"] = _notes_field()


class RecheckForm(forms.Form):
    """Either the verses recited correctly or the ones to repeat, not both."""
    passed = VerseListField(required=False)
    failed = VerseListField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["notes"] = _notes_field()

    def clean(self):
        cleaned = super().clean()
        if "passed" in self.data and "failed" in self.data:
            raise forms.ValidationError("Kirim 'passed' atau 'failed', jangan keduanya.")
        return cleaned

    @property
    def reports_failures(self):
        return "failed" in self.data


class NotesForm(forms.Form):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["notes"] = _notes_field()


class ReassignTeacherForm(forms.Form):
    teacher = forms.ModelChoiceField(queryset=Profile.objects.filter(role=Profile.ROLE_TEACHER))


class PartialCreateForm(forms.Form):
    # range checks for percentage and note are left to the engine so the
    # client gets the same error codes as every other caller
    student = forms.ModelChoiceField(queryset=_students())
    kaca = forms.IntegerField(min_value=1)
    verse_number = forms.IntegerField()
    progress_note = forms.CharField(required=False)
    percentage = forms.IntegerField()


class PartialUpdateForm(forms.Form):
    progress_note = forms.CharField(required=False)
    percentage = forms.IntegerField(required=False)

    def changes(self):
        """Only the fields the client actually sent."""
        return {name: self.cleaned_data.get(name) for name in self.fields if name in self.data}


class RecordFilterForm(forms.Form):
    student = forms.ModelChoiceField(queryset=_students(), required=False)
    teacher = forms.ModelChoiceField(queryset=Profile.objects.filter(role=Profile.ROLE_TEACHER), required=False)
    kaca = forms.IntegerField(min_value=1, required=False)
    status = forms.ChoiceField(choices=HafalanRecord.Status.choices, required=False)
