from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from hijri_converter import Gregorian

from apps.hafalan import history, recheck
from apps.hafalan.models import HafalanRecord


def hijri_label(dt):
    h = Gregorian(dt.year, dt.month, dt.day).to_hijri()
    return f"{h.day} {h.month_name()} {h.year} H"


class Command(BaseCommand):
    help = "Print the timeline of a hafalan record (history entries and recheck rounds)."

    def add_arguments(self, parser):
        parser.add_argument("record_id", type=int)
        parser.add_argument("--rounds", action="store_true", help="Also list recheck rounds")

    def handle(self, *args, **options):
        try:
            record = HafalanRecord.objects.select_related("student__user", "kaca").get(pk=options["record_id"])
        except HafalanRecord.DoesNotExist:
            raise CommandError(f"Hafalan record {options['record_id']} does not exist.")

        self.stdout.write(self.style.MIGRATE_HEADING(
            f"{record.student.display_name} – kaca {record.kaca.page_number} "
            f"({record.kaca.surah_name} {record.kaca.ayat_start}-{record.kaca.ayat_end})"
        ))
        self.stdout.write(f"Status: {record.get_status_display()} | Ayat: {record.completed_verses}")

        for entry in history.list_history(record.pk):
            when = timezone.localtime(entry.occurred_at)
            self.stdout.write(
                f"{when:%Y-%m-%d %H:%M} ({hijri_label(when)})  {entry.action:<20} "
                f"{entry.teacher.display_name:<20} [{entry.completed_verses_snapshot}] {entry.status_snapshot}"
                + (f"  “{entry.note_snapshot}”" if entry.note_snapshot else "")
            )

        if options["rounds"]:
            for r in recheck.list_rounds(record.pk):
                result = "lulus" if r.all_passed else f"ulang: {r.failed_verses}"
                self.stdout.write(f"  Round {r.round_number} by {r.rechecked_by.display_name}: "
                                  f"scope [{r.scope}] → {result}")

        names = ", ".join(p.display_name for p in history.contributors(record.pk))
        self.stdout.write(self.style.SUCCESS(f"Teachers involved: {names or '-'}"))
