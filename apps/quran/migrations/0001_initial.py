from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Kaca',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('page_number', models.PositiveSmallIntegerField(unique=True)),
                ('surah_number', models.PositiveSmallIntegerField()),
                ('surah_name', models.CharField(max_length=64)),
                ('ayat_start', models.PositiveSmallIntegerField()),
                ('ayat_end', models.PositiveSmallIntegerField()),
                ('juz', models.PositiveSmallIntegerField()),
                ('description', models.CharField(blank=True, default='', max_length=255)),
            ],
            options={
                'verbose_name_plural': 'kaca',
                'ordering': ['page_number'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('ayat_start__gte', 1), ('ayat_end__gte', models.F('ayat_start'))),
                        name='kaca_valid_ayat_range',
                    ),
                ],
            },
        ),
    ]
