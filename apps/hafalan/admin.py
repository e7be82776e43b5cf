from django.contrib import admin

from .models import HafalanHistory, HafalanRecord, PartialHafalan, RecheckRecord


class ReadOnlyAdmin(admin.ModelAdmin):
    """Rounds and history are append-only; the admin only shows them."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class RecheckInline(admin.TabularInline):
    model = RecheckRecord
    extra = 0
    can_delete = False
    readonly_fields = ("round_number", "rechecked_at", "rechecked_by", "scope", "failed_verses", "all_passed", "notes")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(HafalanRecord)
class HafalanRecordAdmin(admin.ModelAdmin):
    list_display  = ("student", "kaca", "status", "teacher", "submitted_at", "updated_at")
    list_filter   = ("status", "kaca__juz")
    search_fields = ("student__user__username", "student__student_no", "kaca__surah_name")
    # records are opened and moved only by the engine
    readonly_fields = (
        "student", "kaca", "teacher", "completed_verses", "status", "notes", "submitted_at", "updated_at",
    )
    inlines = [RecheckInline]

    def has_add_permission(self, request):
        return False


@admin.register(RecheckRecord)
class RecheckRecordAdmin(ReadOnlyAdmin):
    list_display = ("hafalan_record", "round_number", "rechecked_by", "all_passed", "rechecked_at")
    list_filter  = ("all_passed",)


@admin.register(HafalanHistory)
class HafalanHistoryAdmin(ReadOnlyAdmin):
    list_display = ("hafalan_record", "occurred_at", "action", "teacher", "status_snapshot")
    list_filter  = ("action",)


@admin.register(PartialHafalan)
class PartialHafalanAdmin(admin.ModelAdmin):
    list_display  = ("student", "kaca", "verse_number", "percentage", "status", "started_at")
    list_filter   = ("status",)
    search_fields = ("student__user__username", "progress_note")
    readonly_fields = ("student", "kaca", "verse_number", "status", "linked_record", "started_at", "closed_at")

    def has_add_permission(self, request):
        return False

    def get_readonly_fields(self, request, obj=None):
        if obj is not None and not obj.is_active:
            return [f.name for f in obj._meta.fields]
        return self.readonly_fields
