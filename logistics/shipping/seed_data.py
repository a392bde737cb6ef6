"""
Sample data for demos and fresh environments.

Every routine is idempotent: rows that already exist (same container code,
customer email or order number) are counted as success.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from logistics.billing.models import Invoice
from logistics.billing.services import mark_overdue_invoices
from logistics.core.validators import is_duplicate_error
from logistics.parties.models import Customer
from .models import Container, Order
from .utils import generate_qr_code

logger = logging.getLogger(__name__)

SEED_TAX_RATE = Decimal('21.00')
INVOICE_ELIGIBLE_STATUSES = ['completed', 'in_progress', 'confirmed']
INVOICE_SEED_LIMIT = 50

# (code, vessel, departure, arrival, etd offset days, eta offset days, status)
SAMPLE_CONTAINERS = [
    ('MSKU1234567', 'MSC OSCAR', "Port d'Anvers, Belgique", 'Port de Douala, Cameroun', 5, 25, 'planned'),
    ('TCLU9876543', 'CMA CGM MARCO POLO', 'Port de Rotterdam, Pays-Bas', 'Port de Lagos, Nigeria', 3, 22, 'planned'),
    ('GESU4567890', 'EVERGREEN EVER ACE', 'Port du Havre, France', "Port d'Abidjan, Côte d'Ivoire", 7, 28, 'planned'),
    ('APLU2345678', 'COSCO SHIPPING UNIVERSE', "Port d'Hambourg, Allemagne", 'Port de Tema, Ghana', -2, 18, 'in_transit'),
    ('OOCU3456789', 'OOCL HONG KONG', 'Port de Felixstowe, Royaume-Uni', 'Port de Dakar, Sénégal', -5, 20, 'in_transit'),
    ('HLCU5678901', 'HAPAG-LLOYD BERLIN', 'Port de Bremerhaven, Allemagne', 'Port de Lomé, Togo', -30, -2, 'arrived'),
    ('ONEU6789012', 'ONE INNOVATION', 'Port de Gênes, Italie', 'Port de Cotonou, Bénin', -28, -1, 'arrived'),
    ('YMLU7890123', 'YANG MING UNANIMITY', 'Port de Barcelone, Espagne', 'Port de Pointe-Noire, Congo', -45, -15, 'delivered'),
    ('PILU8901234', 'PACIFIC INTERNATIONAL LINES', 'Port de Marseille, France', 'Port de Dar es Salaam, Tanzanie', -50, -20, 'delivered'),
    ('ZIMU9012345', 'ZIM CONSTANZA', "Port d'Algésiras, Espagne", 'Port de Mombasa, Kenya', -10, 5, 'delayed'),
    ('MSCU0123456', 'MSC GÜLSÜN', 'Port de Valence, Espagne', 'Port de Luanda, Angola', -8, 7, 'delayed'),
    ('CMAU1234567', 'CMA CGM ANTOINE DE SAINT EXUPERY', 'Port de Zeebrugge, Belgique', 'Port de Durban, Afrique du Sud', -1, 24, 'departed'),
    ('EVERU2345678', 'EVERGREEN EVER GIVEN', 'Port de Southampton, Royaume-Uni', 'Port de Maputo, Mozambique', -3, 22, 'departed'),
]

SAMPLE_CUSTOMERS = [
    {'name': 'Jean Dupont', 'email': 'jean.dupont@example.com', 'phone': '+33 6 12 34 56 78',
     'address': '123 Rue de la Paix', 'city': 'Paris', 'postal_code': '75001', 'country': 'France', 'company': 'Dupont & Co'},
    {'name': 'Marie Martin', 'email': 'marie.martin@example.com', 'phone': '+33 6 23 45 67 89',
     'address': '456 Avenue des Champs', 'city': 'Lyon', 'postal_code': '69001', 'country': 'France', 'company': 'Martin Transport'},
    {'name': 'Ahmed Hassan', 'email': 'ahmed.hassan@example.com', 'phone': '+212 6 12 34 56 78',
     'address': '15 Avenue Mohammed V', 'city': 'Casablanca', 'postal_code': '20000', 'country': 'Maroc', 'company': 'Hassan Import Export'},
    {'name': 'Fatou Diallo', 'email': 'fatou.diallo@example.com', 'phone': '+221 7 12 34 56 78',
     'address': '22 Rue de la Corniche', 'city': 'Dakar', 'postal_code': '10000', 'country': 'Sénégal', 'company': 'Diallo Trading'},
    {'name': 'Koffi Kouassi', 'email': 'koffi.kouassi@example.com', 'phone': '+225 07 12 34 56 78',
     'address': '45 Boulevard de la République', 'city': 'Abidjan', 'postal_code': '01 BP 1234', 'country': "Côte d'Ivoire", 'company': 'Kouassi Group'},
    {'name': 'Chinwe Okonkwo', 'email': 'chinwe.okonkwo@example.com', 'phone': '+234 803 123 4567',
     'address': '89 Victoria Island', 'city': 'Lagos', 'postal_code': '101001', 'country': 'Nigeria', 'company': 'Okonkwo Logistics Ltd'},
]

SAMPLE_ORDER_CONTAINERS = [
    ('MSKU9876543', 'MSC OSCAR', "Port d'Anvers, Belgique", 'Port de Douala, Cameroun', 10, 35, 'planned'),
    ('TCLU1112223', 'CMA CGM MARCO POLO', 'Port de Rotterdam, Pays-Bas', 'Port de Lagos, Nigeria', 8, 28, 'planned'),
    ('APLU7778889', 'COSCO SHIPPING UNIVERSE', "Port d'Hambourg, Allemagne", 'Port de Tema, Ghana', -1, 20, 'departed'),
    ('OOCU2223334', 'OOCL HONG KONG', 'Port de Felixstowe, Royaume-Uni', 'Port de Dakar, Sénégal', -4, 22, 'in_transit'),
]

# (sequence, customer email, service, origin, destination, weight, value, status, delivery offset days, container code)
SAMPLE_ORDERS = [
    (1, 'jean.dupont@example.com', 'fret_maritime', 'Paris, France', 'Douala, Cameroun', '2500.00', '15000.00', 'in_progress', 40, 'MSKU9876543'),
    (2, 'marie.martin@example.com', 'fret_maritime', 'Lyon, France', 'Lagos, Nigeria', '1800.00', '12000.00', 'confirmed', 35, 'TCLU1112223'),
    (3, 'ahmed.hassan@example.com', 'fret_aerien', 'Casablanca, Maroc', 'Bruxelles, Belgique', '350.00', '4200.00', 'completed', -5, None),
    (4, 'fatou.diallo@example.com', 'fret_maritime', 'Anvers, Belgique', 'Dakar, Sénégal', '3100.00', '21000.00', 'in_progress', 22, 'OOCU2223334'),
    (5, 'koffi.kouassi@example.com', 'fret_maritime', "Abidjan, Côte d'Ivoire", 'Paris, France', '500.00', '3500.00', 'completed', -10, None),
    (6, 'chinwe.okonkwo@example.com', 'fret_maritime', 'Lagos, Nigeria', 'Hambourg, Allemagne', '4500.00', '35000.00', 'in_progress', 26, 'APLU7778889'),
    (7, 'chinwe.okonkwo@example.com', 'demenagement', 'Lagos, Nigeria', 'Lyon, France', '2200.00', '18000.00', 'pending', 30, None),
]

SEED_ORDER_SEQUENCE_BASE = 900000

# (email, password, role)
SAMPLE_USERS = [
    ('admin@danemo.be', 'admin123', 'admin'),
    ('operator@danemo.be', 'operator123', 'operator'),
]


def _container_defaults(vessel, departure, arrival, etd_days, eta_days, status):
    now = timezone.now()
    return {
        'vessel': vessel,
        'departure_port': departure,
        'arrival_port': arrival,
        'etd': now + timedelta(days=etd_days),
        'eta': now + timedelta(days=eta_days),
        'status': status,
    }


def seed_containers():
    """Insert the sample containers. Returns one result dict per container."""
    results = []
    for code, *rest in SAMPLE_CONTAINERS:
        try:
            with transaction.atomic():
                container = Container.objects.create(code=code, **_container_defaults(*rest))
            results.append({'code': code, 'ok': True, 'id': container.id})
        except (IntegrityError, DatabaseError) as e:
            if is_duplicate_error(e):
                results.append({'code': code, 'ok': True, 'message': 'Already exists'})
            else:
                logger.error(f"Failed to seed container {code}: {str(e)}")
                results.append({'code': code, 'ok': False, 'message': str(e)})
    return results


def _extract_customers_from_orders(results):
    customers = {}
    orders = Order.objects.exclude(client_email__isnull=True).exclude(client_email='').order_by('created_at')
    for order in orders.values('client_name', 'client_email', 'client_phone'):
        email = order['client_email'].strip().lower()
        if email and email not in customers:
            customers[email] = {
                'name': (order['client_name'] or '').strip(),
                'phone': (order['client_phone'] or '').strip() or None,
            }

    for email, fields in customers.items():
        try:
            with transaction.atomic():
                Customer.objects.create(email=email, status='active', **fields)
            results['customersCreated'] += 1
        except (IntegrityError, DatabaseError) as e:
            if not is_duplicate_error(e):
                results['errors'].append(f"Error creating customer {email}: {str(e)}")


def _link_orders_to_customers(results):
    for customer in Customer.objects.only('id', 'email'):
        Order.objects.filter(customer__isnull=True, client_email__iexact=customer.email).update(customer=customer)
    results['ordersLinked'] = Order.objects.filter(customer__isnull=False).count()


def _create_invoices_for_orders(results):
    eligible = Order.objects.filter(
        customer__isnull=False,
        status__in=INVOICE_ELIGIBLE_STATUSES,
        value__gt=0,
    ).exclude(invoices__isnull=False)[:INVOICE_SEED_LIMIT]

    for order in eligible:
        issue_date = timezone.localdate(order.created_at)
        try:
            with transaction.atomic():
                Invoice.objects.create(
                    customer_id=order.customer_id,
                    order=order,
                    issue_date=issue_date,
                    due_date=issue_date + timedelta(days=30),
                    status='sent' if order.status == 'completed' else 'draft',
                    subtotal=order.value,
                    tax_rate=SEED_TAX_RATE,
                    currency='EUR',
                    notes=f"Facture générée automatiquement depuis la commande {order.order_number}",
                )
            results['invoicesCreated'] += 1
        except (IntegrityError, DatabaseError) as e:
            results['errors'].append(f"Error creating invoice for order {order.order_number}: {str(e)}")


def _mark_old_sent_invoices_paid():
    today = timezone.localdate()
    return Invoice.objects.filter(
        status='sent',
        issue_date__lt=today - timedelta(days=30),
        payment_date__isnull=True,
    ).update(status='paid', payment_date=today, payment_method='virement')


def seed_customers_and_invoices():
    """
    Derive customers from existing orders, link orders by email, invoice the
    eligible orders, then settle old invoices and flag overdue ones.
    """
    results = {'customersCreated': 0, 'ordersLinked': 0, 'invoicesCreated': 0, 'errors': []}

    steps = [
        ('extracting customers', _extract_customers_from_orders),
        ('linking orders', _link_orders_to_customers),
        ('creating invoices', _create_invoices_for_orders),
    ]
    for label, step in steps:
        try:
            step(results)
        except DatabaseError as e:
            logger.error(f"Seed step failed ({label}): {str(e)}")
            results['errors'].append(f"Error {label}: {str(e)}")

    try:
        paid = _mark_old_sent_invoices_paid()
        logger.info(f"Marked {paid} old invoices as paid")
    except DatabaseError as e:
        # Non-critical
        logger.warning(f"Could not update paid invoices: {str(e)}")

    try:
        mark_overdue_invoices()
    except DatabaseError as e:
        results['errors'].append(f"Error marking overdue invoices: {str(e)}")

    return results


def seed_orders():
    """Upsert sample customers, containers and orders linked together"""
    results = {
        'customers': {'created': 0, 'errors': []},
        'containers': {'created': 0, 'errors': []},
        'orders': {'created': 0, 'errors': []},
    }

    customers = {}
    for data in SAMPLE_CUSTOMERS:
        fields = dict(data)
        email = fields.pop('email')
        try:
            with transaction.atomic():
                customer, _ = Customer.objects.update_or_create(email=email, defaults={**fields, 'status': 'active'})
            customers[email] = customer
            results['customers']['created'] += 1
        except DatabaseError as e:
            results['customers']['errors'].append(f"{email}: {str(e)}")

    containers = {}
    for code, *rest in SAMPLE_ORDER_CONTAINERS:
        try:
            with transaction.atomic():
                container, _ = Container.objects.update_or_create(code=code, defaults=_container_defaults(*rest))
            containers[code] = container
            results['containers']['created'] += 1
        except DatabaseError as e:
            results['containers']['errors'].append(f"{code}: {str(e)}")

    year = timezone.now().year
    now = timezone.now()
    for seq, email, service, origin, destination, weight, value, status, delivery_days, container_code in SAMPLE_ORDERS:
        order_number = f"DN{year}{SEED_ORDER_SEQUENCE_BASE + seq:06d}"
        customer = customers.get(email)
        defaults = {
            'client_name': customer.name if customer else email,
            'client_email': email,
            'client_phone': customer.phone if customer else None,
            'service_type': service,
            'origin': origin,
            'destination': destination,
            'weight': Decimal(weight),
            'value': Decimal(value),
            'status': status,
            'estimated_delivery': now + timedelta(days=delivery_days),
            'customer': customer,
            'container': containers.get(container_code) if container_code else None,
        }
        try:
            with transaction.atomic():
                order, _ = Order.objects.update_or_create(order_number=order_number, defaults=defaults)
                if not order.qr_code:
                    order.qr_code = generate_qr_code()
                    order.save(update_fields=['qr_code'])
            results['orders']['created'] += 1
        except DatabaseError as e:
            results['orders']['errors'].append(f"{order_number}: {str(e)}")

    summary = {
        'total_customers': Customer.objects.count(),
        'total_containers': Container.objects.count(),
        'total_orders': Order.objects.count(),
        'linked_orders': Order.objects.filter(customer__isnull=False, container__isnull=False).count(),
    }
    return results, summary


def seed_users():
    """Create the default admin and operator accounts. Existing accounts count as success."""
    User = get_user_model()
    results = []
    for email, password, role in SAMPLE_USERS:
        try:
            with transaction.atomic():
                user = User.objects.create_user(username=email, email=email, password=password, role=role)
            results.append({'email': email, 'ok': True, 'id': user.id})
        except (IntegrityError, DatabaseError) as e:
            if is_duplicate_error(e):
                results.append({'email': email, 'ok': True, 'message': 'Already exists'})
            else:
                logger.error(f"Failed to seed user {email}: {str(e)}")
                results.append({'email': email, 'ok': False, 'message': str(e)})
    return results


def reseed_data():
    """
    Delete every order, customer and container, then seed the sample set again.

    Runs in one transaction: when any sample row fails, the deletion is rolled
    back too and the previous data stays in place. Returns
    ``(results, summary, rolled_back)``.
    """
    with transaction.atomic():
        deleted = {
            'orders': Order.objects.all().delete()[0],
            'customers': Customer.objects.all().delete()[0],
            'containers': Container.objects.all().delete()[0],
        }
        logger.info(f"Reseed removed {deleted}")
        results, summary = seed_orders()
        rolled_back = any(section['errors'] for section in results.values())
        if rolled_back:
            logger.error(f"Reseed failed, keeping previous data: {results}")
            transaction.set_rollback(True)
    return results, summary, rolled_back
