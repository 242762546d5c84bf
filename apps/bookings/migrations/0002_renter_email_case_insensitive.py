from django.db import migrations, models
import django.db.models.functions.text


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RemoveConstraint(
            model_name="renter",
            name="renter_unique_live_email",
        ),
        migrations.AddConstraint(
            model_name="renter",
            constraint=models.UniqueConstraint(
                django.db.models.functions.text.Lower("email"),
                condition=models.Q(("deleted_at__isnull", True), ("email__isnull", False)),
                name="renter_unique_live_email_ci",
            ),
        ),
    ]
