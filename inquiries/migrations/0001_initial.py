import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Inquiry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rfq_number', models.CharField(help_text='Human-readable RFQ number', max_length=100, unique=True)),
                ('title', models.CharField(blank=True, max_length=255)),
                ('customer_reference', models.CharField(help_text='Customer identifier or name', max_length=255)),
                ('currency', models.CharField(default='CAD', help_text='Currency of record', max_length=3)),
                ('status', models.CharField(choices=[('NEW', 'New RFQ received'), ('DRAFT', 'Draft in progress'), ('SENT', 'Sent to customer'), ('NEGOTIATING', 'Under negotiation'), ('ACCEPTED', 'Accepted by customer'), ('DECLINED', 'Declined by customer'), ('PROCESSED', 'Processed and completed')], default='NEW', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inquiries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'inquiries',
                'ordering': ['-created_at'],
            },
        ),
    ]
