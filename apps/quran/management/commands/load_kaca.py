import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.quran.models import Kaca

DEFAULT_DATA = Path(__file__).resolve().parents[2] / "data" / "kaca_juz_1_2.json"

REQUIRED_KEYS = ("pageNumber", "surahNumber", "surahName", "ayatStart", "ayatEnd", "juz")


def consolidate(entries):
    """
    دمج الإدخالات التي تقع على نفس الصفحة في إدخال واحد.
    The first surah on a page stays primary; the rest only show up in the description.
    """
    pages = {}
    for entry in entries:
        piece = f"{entry['surahName']} {entry['ayatStart']}-{entry['ayatEnd']}"
        existing = pages.get(entry["pageNumber"])
        if existing is None:
            pages[entry["pageNumber"]] = dict(entry, description=piece)
        else:
            existing["description"] = f"{existing['description']}, {piece}"
    return [pages[n] for n in sorted(pages)]


class Command(BaseCommand):
    help = "Load or update the kaca (page → verse range) roster from a JSON file."

    def add_arguments(self, parser):
        parser.add_argument(
            "path", nargs="?", default=str(DEFAULT_DATA),
            help="JSON list of {pageNumber, surahNumber, surahName, ayatStart, ayatEnd, juz}",
        )

    def handle(self, *args, **options):
        path = Path(options["path"])
        try:
            entries = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise CommandError(f"File not found: {path}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON in {path}: {e}")

        if not isinstance(entries, list):
            raise CommandError("Roster file must contain a JSON list.")

        for i, entry in enumerate(entries):
            missing = [k for k in REQUIRED_KEYS if k not in entry]
            if missing:
                raise CommandError(f"Entry {i} is missing {', '.join(missing)}.")
            if not 1 <= entry["ayatStart"] <= entry["ayatEnd"]:
                raise CommandError(f"Entry {i} (page {entry['pageNumber']}) has an invalid ayat range.")

        pages = consolidate(entries)

        created = 0
        updated = 0
        with transaction.atomic():
            for page in pages:
                defaults = {
                    "surah_number": page["surahNumber"],
                    "surah_name": page["surahName"],
                    "ayat_start": page["ayatStart"],
                    "ayat_end": page["ayatEnd"],
                    "juz": page["juz"],
                    "description": page["description"],
                }
                # upsert بدل الحذف للحفاظ على سجلات الحفظ الموجودة
                _, was_created = Kaca.objects.update_or_create(
                    page_number=page["pageNumber"], defaults=defaults,
                )
                if was_created:
                    created += 1
                else:
                    updated += 1

        self.stdout.write(self.style.SUCCESS(
            f"Done. {len(entries)} entries → {len(pages)} pages. Created {created}, Updated {updated}."
        ))
