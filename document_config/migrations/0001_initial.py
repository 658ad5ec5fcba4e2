import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FacilityDocumentConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("singleton_key", models.CharField(default="default", editable=False, max_length=20, unique=True)),
                ("staff_pic_full_name", models.CharField(blank=True, default="", max_length=255)),
                ("staff_pic_title", models.CharField(blank=True, default="", max_length=255)),
                ("ikohza_head_name", models.CharField(blank=True, default="", max_length=255)),
                ("ikohza_head_title", models.CharField(blank=True, default="", max_length=255)),
                ("ikohza_head_department", models.CharField(blank=True, default="", max_length=255)),
                ("ikohza_head_institute", models.CharField(blank=True, default="", max_length=255)),
                ("ikohza_head_university", models.CharField(blank=True, default="", max_length=255)),
                ("ikohza_head_address", models.TextField(blank=True, default="")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("ikohza_head_signature", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="bookings.fileblob")),
                ("staff_pic_signature", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="bookings.fileblob")),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "facility document config",
                "verbose_name_plural": "facility document config",
            },
        ),
    ]
