import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('inquiries', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='QuotationVersion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('version_number', models.PositiveIntegerField()),
                ('entry_type', models.CharField(choices=[('INTERNAL_QUOTE', 'Internal Quote'), ('CUSTOMER_FEEDBACK', 'Customer Feedback'), ('COUNTER_OFFER', 'Counter Offer')], max_length=20)),
                ('status', models.CharField(choices=[('NEW', 'New')], default='NEW', max_length=20)),
                ('final_price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('notes', models.TextField(blank=True)),
                ('submission_key', models.CharField(blank=True, help_text='Client token that makes a re-submitted create return the same version', max_length=64, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotation_versions', to=settings.AUTH_USER_MODEL)),
                ('inquiry', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='versions', to='inquiries.inquiry')),
            ],
            options={
                'ordering': ['inquiry', 'version_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('inquiry', 'version_number'), name='unique_version_number_per_inquiry'),
                    models.UniqueConstraint(condition=models.Q(('submission_key__isnull', False)), fields=('inquiry', 'submission_key'), name='unique_submission_key_per_inquiry'),
                    models.CheckConstraint(condition=models.Q(('version_number__gte', 1)), name='version_number_starts_at_one'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QuotationVersionItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField()),
                ('unit_price', models.DecimalField(decimal_places=2, help_text="In the inquiry's currency", max_digits=12)),
                ('total_price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('comment', models.TextField(blank=True)),
                ('catalog_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='version_items', to='catalog.catalogitem')),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='items', to='negotiation.quotationversion')),
            ],
            options={
                'ordering': ['id'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 1)), name='version_item_quantity_positive'),
                    models.CheckConstraint(condition=models.Q(('unit_price__gte', 0)), name='version_item_unit_price_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CustomerResponse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('ACCEPTED', 'Accepted'), ('DECLINED', 'Declined'), ('NEGOTIATING', 'Negotiating')], max_length=20)),
                ('comments', models.TextField(blank=True)),
                ('requested_changes', models.TextField(blank=True)),
                ('responded_at', models.DateTimeField(auto_now_add=True)),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_responses', to=settings.AUTH_USER_MODEL)),
                ('version', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='customer_response', to='negotiation.quotationversion')),
            ],
        ),
        migrations.CreateModel(
            name='QuotationResponse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('response_number', models.PositiveIntegerField()),
                ('overall_status', models.CharField(choices=[('PENDING', 'Pending'), ('ACCEPTED', 'Accepted'), ('DECLINED', 'Declined'), ('PARTIAL_ACCEPTED', 'Partially Accepted'), ('NEGOTIATING', 'Negotiating')], max_length=20)),
                ('response_date', models.DateTimeField()),
                ('customer_contact_person', models.CharField(blank=True, max_length=255)),
                ('communication_method', models.CharField(choices=[('EMAIL', 'Email'), ('PHONE', 'Phone'), ('MEETING', 'Meeting'), ('PORTAL', 'Portal')], max_length=10)),
                ('overall_comments', models.TextField(blank=True)),
                ('requested_delivery_date', models.DateField(blank=True, null=True)),
                ('payment_terms_requested', models.CharField(blank=True, max_length=255)),
                ('special_instructions', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotation_responses', to=settings.AUTH_USER_MODEL)),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='quotation_responses', to='negotiation.quotationversion')),
            ],
            options={
                'ordering': ['version', 'response_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('version', 'response_number'), name='unique_response_number_per_version'),
                    models.CheckConstraint(condition=models.Q(('response_number__gte', 1)), name='response_number_starts_at_one'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QuotationResponseItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_status', models.CharField(choices=[('PENDING', 'Pending'), ('ACCEPTED', 'Accepted'), ('DECLINED', 'Declined'), ('COUNTER_PROPOSED', 'Counter Proposed'), ('NEEDS_CLARIFICATION', 'Needs Clarification')], max_length=20)),
                ('requested_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('requested_unit_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('requested_total_price', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('customer_sku_reference', models.CharField(blank=True, max_length=100)),
                ('item_specific_comments', models.TextField(blank=True)),
                ('alternative_suggestions', models.TextField(blank=True)),
                ('delivery_requirements', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('catalog_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='response_items', to='catalog.catalogitem')),
                ('response', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='items', to='negotiation.quotationresponse')),
                ('version_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='response_items', to='negotiation.quotationversionitem')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='NegotiationCommunication',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('communication_type', models.CharField(choices=[('EMAIL', 'Email'), ('PHONE', 'Phone'), ('MEETING', 'Meeting'), ('PORTAL', 'Portal')], max_length=10)),
                ('direction', models.CharField(choices=[('INBOUND', 'Inbound'), ('OUTBOUND', 'Outbound')], max_length=10)),
                ('subject', models.CharField(blank=True, max_length=255)),
                ('content', models.TextField()),
                ('contact_person', models.CharField(blank=True, max_length=255)),
                ('communication_date', models.DateTimeField()),
                ('follow_up_required', models.BooleanField(default=False)),
                ('follow_up_date', models.DateTimeField(blank=True, null=True)),
                ('follow_up_completed', models.BooleanField(default=False)),
                ('follow_up_completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('entered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='negotiation_communications', to=settings.AUTH_USER_MODEL)),
                ('inquiry', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='communications', to='inquiries.inquiry')),
                ('version', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='communications', to='negotiation.quotationversion')),
            ],
            options={
                'ordering': ['-communication_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='SkuNegotiationHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_type', models.CharField(choices=[('PRICE_CHANGE', 'Price Change'), ('QUANTITY_CHANGE', 'Quantity Change'), ('BOTH', 'Price and Quantity Change')], max_length=20)),
                ('old_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('new_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('old_unit_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('new_unit_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('change_reason', models.TextField(blank=True)),
                ('changed_by', models.CharField(choices=[('INTERNAL', 'Internal'), ('CUSTOMER', 'Customer')], default='CUSTOMER', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('catalog_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='negotiation_history', to='catalog.catalogitem')),
                ('communication', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='sku_changes', to='negotiation.negotiationcommunication')),
                ('entered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sku_changes', to=settings.AUTH_USER_MODEL)),
                ('inquiry', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sku_history', to='inquiries.inquiry')),
                ('version', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='sku_changes', to='negotiation.quotationversion')),
            ],
            options={
                'verbose_name_plural': 'SKU negotiation history',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['inquiry', 'catalog_item'], name='sku_history_inquiry_item_idx')],
            },
        ),
    ]
