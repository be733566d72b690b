# Generated manually on 2026-10-19 10:00

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

from apps.fcm.conf import get_setting


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FcmToken",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("fcm_token", models.CharField(max_length=512, unique=True, verbose_name="FCM Token")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fcm_tokens",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "FCM Token",
                "verbose_name_plural": "FCM Tokens",
                "db_table": get_setting("TOKENS_TABLE", "fcm_tokens"),
                "ordering": ["id"],
                "indexes": [models.Index(fields=["user", "created_at"], name="fcm_tokens_user_created_idx")],
            },
        ),
    ]
