from django.conf import settings
from django.db import models


class Container(models.Model):
    """Shipping container on a vessel between two ports"""
    STATUS_CHOICES = [
        ('planned', 'Planifié'),
        ('departed', 'Départ confirmé'),
        ('in_transit', 'En transit'),
        ('arrived', 'Arrivé'),
        ('delivered', 'Livré'),
        ('delayed', 'Retard'),
    ]

    code = models.CharField(max_length=50, unique=True)
    vessel = models.CharField(max_length=255, blank=True, null=True)
    departure_port = models.CharField(max_length=255, blank=True, null=True)
    arrival_port = models.CharField(max_length=255, blank=True, null=True)
    etd = models.DateTimeField(blank=True, null=True)
    eta = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='planned')
    client = models.ForeignKey('parties.Client', on_delete=models.SET_NULL, null=True, blank=True, related_name='containers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'containers'
        ordering = ['-created_at']

    def __str__(self):
        return self.code


class Order(models.Model):
    """Customer shipment, tracked publicly by its order number"""
    STATUS_CHOICES = [
        ('pending', 'En attente'),
        ('confirmed', 'Confirmée'),
        ('in_progress', 'En cours'),
        ('completed', 'Terminée'),
        ('cancelled', 'Annulée'),
    ]

    order_number = models.CharField(max_length=50, unique=True)
    client_name = models.CharField(max_length=255)
    client_email = models.EmailField(blank=True, null=True)
    client_phone = models.CharField(max_length=50, blank=True, null=True)
    recipient_name = models.CharField(max_length=255, blank=True, null=True)
    recipient_email = models.EmailField(blank=True, null=True)
    recipient_phone = models.CharField(max_length=50, blank=True, null=True)
    recipient_address = models.TextField(blank=True, null=True)
    recipient_city = models.CharField(max_length=100, blank=True, null=True)
    recipient_postal_code = models.CharField(max_length=20, blank=True, null=True)
    recipient_country = models.CharField(max_length=100, blank=True, null=True)
    service_type = models.CharField(max_length=100, blank=True, default='')
    origin = models.CharField(max_length=255, blank=True, default='')
    destination = models.CharField(max_length=255, blank=True, default='')
    weight = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    value = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    estimated_delivery = models.DateTimeField(blank=True, null=True)
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    container = models.ForeignKey(Container, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    qr_code = models.CharField(max_length=100, unique=True, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='orders_status_idx'),
            models.Index(fields=['client_email'], name='orders_client_email_idx'),
        ]

    def __str__(self):
        return self.order_number

    @property
    def container_code(self):
        return self.container.code if self.container_id else None

    @property
    def notification_email(self):
        return self.recipient_email or self.client_email

    @property
    def notification_phone(self):
        return self.recipient_phone or self.client_phone

    @property
    def notification_name(self):
        return self.recipient_name or self.client_name


class Package(models.Model):
    """Physical parcel carrying a QR label"""
    STATUS_CHOICES = [
        ('preparation', 'En préparation'),
        ('expedie', 'Expédié'),
        ('en_transit', 'En transit'),
        ('arrive_port', 'Arrivé au port'),
        ('dedouane', 'Dédouané'),
        ('livre', 'Livré'),
    ]

    qr_code = models.CharField(max_length=100, unique=True)
    reference = models.CharField(max_length=100, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    client = models.ForeignKey('parties.Client', on_delete=models.SET_NULL, null=True, blank=True, related_name='packages')
    container = models.ForeignKey(Container, on_delete=models.SET_NULL, null=True, blank=True, related_name='packages')
    order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True, related_name='packages')
    weight = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    value = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='preparation')
    last_scan_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'packages'
        ordering = ['-created_at']

    def __str__(self):
        return self.qr_code


class TrackingEvent(models.Model):
    """Timestamped status/location entry in an order's history"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, null=True, blank=True, related_name='tracking_events')
    package = models.ForeignKey(Package, on_delete=models.CASCADE, null=True, blank=True, related_name='tracking_events')
    status = models.CharField(max_length=50)
    location = models.CharField(max_length=255, blank=True, null=True)
    description = models.TextField(blank=True, null=True)
    operator = models.CharField(max_length=255, blank=True, null=True)
    event_date = models.DateTimeField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='tracking_events')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'tracking_events'
        ordering = ['event_date']

    def __str__(self):
        return f"{self.status} @ {self.event_date:%Y-%m-%d %H:%M}"
