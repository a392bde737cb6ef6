from django.db import models
from django.utils import timezone


class InventoryItem(models.Model):
    """Warehouse item: parcel, vehicle or goods, optionally loaded in a container"""
    TYPE_CHOICES = [
        ('colis', 'Colis'),
        ('vehicule', 'Véhicule'),
        ('marchandise', 'Marchandise'),
    ]
    STATUS_CHOICES = [
        ('en_stock', 'En stock'),
        ('en_transit', 'En transit'),
        ('livre', 'Livré'),
        ('en_attente', 'En attente'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='colis')
    reference = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    client = models.CharField(max_length=255, blank=True, default='')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='en_stock')
    location = models.CharField(max_length=255, blank=True, default='')
    # Free text as entered by the warehouse ("12kg", "120x80x60cm")
    poids = models.CharField(max_length=50, blank=True, default='')
    dimensions = models.CharField(max_length=100, blank=True, default='')
    valeur = models.CharField(max_length=50, blank=True, default='')
    date_ajout = models.DateField(default=timezone.localdate)
    container = models.ForeignKey('shipping.Container', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_items')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'inventory'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['reference'], name='inventory_reference_idx'),
            models.Index(fields=['type', 'status'], name='inventory_type_status_idx'),
        ]

    def __str__(self):
        return f"{self.reference} ({self.get_type_display()})"
