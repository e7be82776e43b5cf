# apps/hafalan/views.py
import functools
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.accounts.models import Profile
from apps.quran.roster import UnknownPage

from . import history, partial, recheck, records
from .ayat import mark_verses_complete
from .exceptions import HafalanError
from .forms import (
    MarkVersesForm,
    NotesForm,
    PartialCreateForm,
    PartialUpdateForm,
    ReassignTeacherForm,
    RecheckForm,
    RecordFilterForm,
)
from .models import HafalanRecord, PartialHafalan

logger = logging.getLogger(__name__)


# ---- helpers ----

def _error(code, message, status, **extra):
    return JsonResponse({"status": "error", "code": code, "message": message, **extra}, status=status)


def _form_error(form):
    return _error("invalid_request", "Data tidak valid.", 400, errors=form.errors.get_json_data())


def _profile(request):
    return getattr(request.user, "profile", None)


def hafalan_api(teacher_only=False):
    """Login + role check, and engine errors turned into JSON responses."""
    def decorator(view):
        @login_required
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            profile = _profile(request)
            if profile is None or (teacher_only and profile.role != Profile.ROLE_TEACHER):
                return _error("permission_denied", "Permission denied.", 403)
            try:
                return view(request, profile, *args, **kwargs)
            except HafalanError as e:
                return _error(e.code, e.message, e.status, details=e.context)
            except UnknownPage as e:
                return _error(e.code, str(e), 404)
            except (HafalanRecord.DoesNotExist, PartialHafalan.DoesNotExist):
                return _error("not_found", "Data tidak ditemukan.", 404)
        return wrapper
    return decorator


def _person(profile):
    if profile is None:
        return None
    return {"id": profile.pk, "name": profile.display_name}


def _record_json(record):
    return {
        "id": record.pk,
        "student": _person(record.student),
        "teacher": _person(record.teacher),
        "kaca": record.kaca.page_number,
        "kaca_id": record.kaca_id,
        "surah": record.kaca.surah_name,
        "completed_verses": record.completed_verses.to_list(),
        "record_status": record.status,
        "notes": record.notes,
        "submitted_at": record.submitted_at.isoformat(),
        "updated_at": record.updated_at.isoformat(),
    }


def _round_json(round_):
    return {
        "round_number": round_.round_number,
        "rechecked_at": round_.rechecked_at.isoformat(),
        "rechecked_by": _person(round_.rechecked_by),
        "scope": round_.scope.to_list(),
        "failed_verses": round_.failed_verses.to_list(),
        "all_passed": round_.all_passed,
        "notes": round_.notes,
    }


def _partial_json(p):
    return {
        "id": p.pk,
        "student_id": p.student_id,
        "kaca_id": p.kaca_id,
        "verse_number": p.verse_number,
        "progress_note": p.progress_note,
        "percentage": p.percentage,
        "partial_status": p.status,
        "linked_record": p.linked_record_id,
        "closed_at": p.closed_at.isoformat() if p.closed_at else None,
    }


def _visible_record(profile, record_id):
    qs = HafalanRecord.objects.select_related("kaca", "student__user", "teacher__user")
    if profile.role != Profile.ROLE_TEACHER:
        qs = qs.filter(student=profile)
    return qs.get(pk=record_id)


# ---- hafalan records ----

@require_GET
@hafalan_api()
def record_list(request, profile):
    """Records filtered by student, teacher, kaca or status; students only see their own."""
    form = RecordFilterForm(request.GET)
    if not form.is_valid():
        return _form_error(form)
    data = form.cleaned_data
    student = data["student"]
    if profile.role != Profile.ROLE_TEACHER:
        student = profile
    qs = records.list_records(
        student_id=student.pk if student else None,
        teacher_id=data["teacher"].pk if data["teacher"] else None,
        kaca_id=data["kaca"],
        status=data["status"] or None,
    )
    payload = {"status": "success", "records": [_record_json(r) for r in qs]}
    if student is not None:
        payload["summary"] = records.progress_summary(student.pk)
    return JsonResponse(payload)


@require_POST
@hafalan_api(teacher_only=True)
def mark_verses(request, teacher):
    form = MarkVersesForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    data = form.cleaned_data
    record = mark_verses_complete(
        data["student"].pk, data["kaca"], data["verses"], teacher.pk, notes=data["notes"] or None,
    )
    return JsonResponse({"status": "success", "record": _record_json(record)})


@require_GET
@hafalan_api()
def record_detail(request, profile, record_id):
    record = _visible_record(profile, record_id)
    return JsonResponse({
        "status": "success",
        "record": _record_json(record),
        "current_scope": recheck.current_scope(record).to_list(),
        "rounds": [_round_json(r) for r in recheck.list_rounds(record.pk)],
    })


@require_GET
@hafalan_api()
def record_history(request, profile, record_id):
    record = _visible_record(profile, record_id)
    entries = [
        {
            "occurred_at": h.occurred_at.isoformat(),
            "action": h.action,
            "teacher": _person(h.teacher),
            "completed_verses": h.completed_verses_snapshot.to_list(),
            "record_status": h.status_snapshot,
            "note": h.note_snapshot,
        }
        for h in history.list_history(record.pk)
    ]
    return JsonResponse({"status": "success", "history": entries})


@require_POST
@hafalan_api(teacher_only=True)
def submit_recheck(request, teacher, record_id):
    form = RecheckForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    data = form.cleaned_data
    if form.reports_failures:
        round_ = recheck.submit_recheck_failures(record_id, teacher.pk, data["failed"], notes=data["notes"])
    else:
        round_ = recheck.submit_recheck(record_id, teacher.pk, data["passed"], notes=data["notes"])
    record = records.get_record(record_id)
    return JsonResponse({
        "status": "success",
        "round": _round_json(round_),
        "record": _record_json(record),
    })


@require_POST
@hafalan_api(teacher_only=True)
def update_notes(request, teacher, record_id):
    form = NotesForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    record = records.update_notes(record_id, teacher.pk, form.cleaned_data["notes"])
    return JsonResponse({"status": "success", "record": _record_json(record)})


@require_POST
@hafalan_api(teacher_only=True)
def reassign_teacher(request, teacher, record_id):
    form = ReassignTeacherForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    record = records.reassign_teacher(record_id, form.cleaned_data["teacher"].pk, teacher.pk)
    return JsonResponse({"status": "success", "record": _record_json(record)})


# ---- partial hafalan ----

@require_POST
@hafalan_api(teacher_only=True)
def create_partial(request, teacher):
    form = PartialCreateForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    data = form.cleaned_data
    p = partial.create_partial(
        data["student"].pk, data["kaca"], data["verse_number"], teacher.pk,
        data["progress_note"], data["percentage"],
    )
    return JsonResponse({"status": "success", "partial": _partial_json(p)}, status=201)


@require_POST
@hafalan_api(teacher_only=True)
def update_partial(request, teacher, partial_id):
    form = PartialUpdateForm(request.POST)
    if not form.is_valid():
        return _form_error(form)
    p = partial.update_partial(partial_id, **form.changes())
    return JsonResponse({"status": "success", "partial": _partial_json(p)})


@require_POST
@hafalan_api(teacher_only=True)
def complete_partial(request, teacher, partial_id):
    p, record = partial.complete_partial(partial_id, teacher.pk)
    return JsonResponse({"status": "success", "partial": _partial_json(p), "record": _record_json(record)})


@require_POST
@hafalan_api(teacher_only=True)
def cancel_partial(request, teacher, partial_id):
    p = partial.cancel_partial(partial_id)
    return JsonResponse({"status": "success", "partial": _partial_json(p)})
