import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ShopSession",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "shop",
                    models.CharField(
                        help_text="Shop domain, e.g. example.myshopify.com",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "access_token",
                    models.CharField(
                        help_text="Offline Admin API access token",
                        max_length=255,
                    ),
                ),
                (
                    "scope",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Comma separated access scopes",
                        max_length=512,
                    ),
                ),
            ],
            options={
                "verbose_name": "Shop session",
                "verbose_name_plural": "Shop sessions",
                "ordering": ["shop"],
            },
        ),
    ]
