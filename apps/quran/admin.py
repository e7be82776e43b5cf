from django.contrib import admin

from .models import Kaca


@admin.register(Kaca)
class KacaAdmin(admin.ModelAdmin):
    list_display  = ("page_number", "surah_name", "ayat_start", "ayat_end", "juz")
    list_filter   = ("juz",)
    search_fields = ("surah_name", "description")
    ordering      = ("page_number",)
