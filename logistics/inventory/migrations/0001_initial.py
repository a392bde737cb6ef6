import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('shipping', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('colis', 'Colis'), ('vehicule', 'Véhicule'), ('marchandise', 'Marchandise')], default='colis', max_length=20)),
                ('reference', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, default='')),
                ('client', models.CharField(blank=True, default='', max_length=255)),
                ('status', models.CharField(choices=[('en_stock', 'En stock'), ('en_transit', 'En transit'), ('livre', 'Livré'), ('en_attente', 'En attente')], default='en_stock', max_length=20)),
                ('location', models.CharField(blank=True, default='', max_length=255)),
                ('poids', models.CharField(blank=True, default='', max_length=50)),
                ('dimensions', models.CharField(blank=True, default='', max_length=100)),
                ('valeur', models.CharField(blank=True, default='', max_length=50)),
                ('date_ajout', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('container', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_items', to='shipping.container')),
            ],
            options={
                'db_table': 'inventory',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['reference'], name='inventory_reference_idx'),
                    models.Index(fields=['type', 'status'], name='inventory_type_status_idx'),
                ],
            },
        ),
    ]
