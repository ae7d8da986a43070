from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('stores', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(max_length=64)),
                ('din_number', models.CharField(blank=True, db_index=True, max_length=32, null=True)),
                ('upc', models.CharField(blank=True, max_length=32, null=True)),
                ('manufacturer_code', models.CharField(blank=True, max_length=32)),
                ('brand_name', models.CharField(blank=True, max_length=200, null=True)),
                ('generic_name', models.CharField(blank=True, max_length=200, null=True)),
                ('strength', models.CharField(blank=True, max_length=64, null=True)),
                ('description', models.CharField(max_length=512)),
                ('size', models.DecimalField(decimal_places=3, default=0, max_digits=12)),
                ('unit_of_measure', models.CharField(blank=True, max_length=16)),
                ('marketing_status', models.CharField(blank=True, max_length=32)),
                ('order_control', models.CharField(blank=True, max_length=32)),
                ('backroom_stock', models.IntegerField(default=0)),
                ('on_hand', models.IntegerField(default=0)),
                ('total_quantity', models.IntegerField(default=0)),
                ('cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('days_aging', models.IntegerField(blank=True, null=True)),
                ('report_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_items', to='stores.store')),
            ],
            options={
                'ordering': ['description'],
                'indexes': [models.Index(fields=['store', 'description'], name='idx_inv_store_desc'), models.Index(fields=['days_aging'], name='idx_inv_days_aging')],
            },
        ),
    ]
