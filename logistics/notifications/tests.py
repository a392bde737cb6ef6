"""
Test suite for Notifications module
Tests: message content, email/SMS channels, container and order fan-out,
scheduling after commit, notification endpoints
"""
from unittest import mock

import requests
from django.core import mail
from django.test import TestCase, override_settings
from rest_framework import status

from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.notifications.content import (
    build_client_status_email, build_client_status_sms, build_tracking_url,
    container_stage_label, ensure_tracking_url, get_first_name, order_stage_label,
)
from logistics.notifications.dispatch import (
    notify_container_status_change, notify_order_status_change,
    schedule_container_notification, schedule_order_notification,
)
from logistics.notifications.email import SMTP_BACKEND, NotificationConfigError, send_email
from logistics.notifications.sms import send_sms

TWILIO_SETTINGS = {
    'TWILIO_ACCOUNT_SID': 'AC123',
    'TWILIO_AUTH_TOKEN': 'token',
    'TWILIO_FROM': '+3220000000',
}


def twilio_response(ok=True, status_code=201):
    return mock.Mock(ok=ok, status_code=status_code, text='')


@override_settings(APP_BASE_URL='https://danemo.be/')
class ContentTests(TestCase):
    """Test message content helpers"""

    def test_first_name(self):
        """Test the first word is used, with a default"""
        self.assertEqual(get_first_name('Jean Dupont'), 'Jean')
        self.assertEqual(get_first_name('   '), 'client')
        self.assertEqual(get_first_name(None), 'client')

    def test_tracking_url_priority(self):
        """Test order number, then container code, then QR code"""
        self.assertEqual(build_tracking_url(order_number='DN1', container_code='C1'), 'https://danemo.be/tracking?tracking=DN1')
        self.assertEqual(build_tracking_url(container_code='MSKU 1'), 'https://danemo.be/tracking?code=MSKU%201')
        self.assertEqual(build_tracking_url(qr_code='PKG-1'), 'https://danemo.be/qr?code=PKG-1')
        self.assertEqual(build_tracking_url(), 'https://danemo.be/tracking')

    def test_ensure_tracking_url(self):
        """Test relative links are made absolute"""
        self.assertEqual(ensure_tracking_url('https://x.test/a'), 'https://x.test/a')
        self.assertEqual(ensure_tracking_url('qr?code=1'), 'https://danemo.be/qr?code=1')
        self.assertEqual(ensure_tracking_url(None), 'https://danemo.be/tracking')

    def test_stage_labels(self):
        """Test stage labels and their fallback"""
        self.assertEqual(container_stage_label('arrived'), 'arrivée dans votre région')
        self.assertEqual(order_stage_label('completed'), 'livrée')
        self.assertEqual(order_stage_label('unknown'), 'en cours de livraison')
        self.assertEqual(container_stage_label('unknown'), 'en cours de livraison')

    def test_status_email(self):
        """Test the rendered email carries name, reference, stage and link"""
        content = build_client_status_email('Marie Ilunga', 'DN2026000001', 'livrée', '/tracking?tracking=DN2026000001')
        self.assertIn('Bonjour Marie', content.html)
        self.assertIn('DN2026000001', content.html)
        self.assertIn('Elle est maintenant <strong>livrée</strong>', content.html)
        self.assertIn('https://danemo.be/tracking?tracking=DN2026000001', content.html)

    def test_status_email_for_container(self):
        """Test container emails use the masculine pronoun"""
        content = build_client_status_email('Paul', 'MSKU1', 'arrivé', item_label='conteneur')
        self.assertIn('Il est maintenant', content.html)

    def test_status_sms(self):
        """Test the SMS text"""
        body = build_client_status_sms('Jean Dupont', 'DN1', 'livrée', 'https://danemo.be/t')
        self.assertEqual(body, 'Danemo: Bonjour Jean, votre commande DN1 est maintenant livrée. Suivi: https://danemo.be/t')

    def test_status_sms_in_english(self):
        """Test the SMS text follows the requested language"""
        body = build_client_status_sms('Jean Dupont', 'DN1', 'delivered', 'https://danemo.be/t', lang='en')
        self.assertEqual(body, 'Danemo: Hello Jean, your order DN1 is now delivered. Tracking: https://danemo.be/t')


class ChannelTests(TestCase):
    """Test the email and SMS channels"""

    def test_send_email(self):
        """Test an HTML email with a plain-text body"""
        send_email('jean@example.be', 'Sujet', '<p>Bonjour <b>Jean</b></p>')
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.body, 'Bonjour Jean')
        self.assertEqual(message.alternatives[0][1], 'text/html')

    @override_settings(EMAIL_BACKEND=SMTP_BACKEND, SMTP_HOST='', SMTP_USER='', SMTP_PASS='')
    def test_send_email_without_smtp_config(self):
        """Test the SMTP backend requires credentials"""
        with self.assertRaises(NotificationConfigError):
            send_email('jean@example.be', 'Sujet', '<p>x</p>')

    @override_settings(TWILIO_ACCOUNT_SID='', TWILIO_AUTH_TOKEN='', TWILIO_FROM='')
    def test_sms_without_config(self):
        """Test SMS is skipped without Twilio settings"""
        result = send_sms('+32470000000', 'Bonjour')
        self.assertFalse(result.success)
        self.assertEqual(result.reason, 'missing_config')

    @override_settings(**TWILIO_SETTINGS)
    @mock.patch('logistics.notifications.sms.requests.post')
    def test_sms_sent(self, mock_post):
        """Test the Twilio request"""
        mock_post.return_value = twilio_response()
        result = send_sms('+32470000000', 'Bonjour')
        self.assertTrue(result.success)
        args, kwargs = mock_post.call_args
        self.assertIn('/Accounts/AC123/Messages.json', args[0])
        self.assertEqual(kwargs['data'], {'From': '+3220000000', 'To': '+32470000000', 'Body': 'Bonjour'})
        self.assertEqual(kwargs['auth'], ('AC123', 'token'))

    @override_settings(**TWILIO_SETTINGS)
    @mock.patch('logistics.notifications.sms.requests.post')
    def test_sms_twilio_error(self, mock_post):
        """Test a non-2xx answer is reported with its status"""
        mock_post.return_value = twilio_response(ok=False, status_code=400)
        result = send_sms('+32470000000', 'Bonjour')
        self.assertEqual(result.reason, 'twilio_error')
        self.assertEqual(result.status, 400)

    @override_settings(**TWILIO_SETTINGS)
    @mock.patch('logistics.notifications.sms.requests.post', side_effect=requests.exceptions.ConnectionError('down'))
    def test_sms_network_error(self, mock_post):
        """Test network errors never raise"""
        result = send_sms('+32470000000', 'Bonjour')
        self.assertEqual(result.reason, 'unexpected_error')


@override_settings(**TWILIO_SETTINGS)
class ContainerNotificationTests(TestCase):
    """Test container status fan-out"""

    def setUp(self):
        self.container = TestDataFactory.create_container(status='in_transit')
        TestDataFactory.create_order(
            client_name='Jean Dupont', client_email='jean@example.be', client_phone='+32470000001', container=self.container,
        )
        TestDataFactory.create_order(client_name='Awa Diallo', client_email='awa@example.be', container=self.container)
        TestDataFactory.create_order(client_name='Sans Contact', container=self.container)

    @mock.patch('logistics.notifications.sms.requests.post')
    def test_fan_out(self, mock_post):
        """Test every contact is notified on every channel"""
        mock_post.return_value = twilio_response()
        result = notify_container_status_change(self.container.id, 'arrived', previous_status='in_transit')
        self.assertEqual(result.emails_sent, 2)
        self.assertEqual(result.sms_sent, 1)
        self.assertEqual(result.recipients, 2)
        self.assertEqual(result.failures, [])
        self.assertEqual(len(mail.outbox), 2)
        self.assertIn('arrivée dans votre région', mail.outbox[0].alternatives[0][0])
        self.assertTrue(AuditLog.objects.filter(action='notification', model_name='Container').exists())

    @mock.patch('logistics.notifications.sms.requests.post')
    def test_custom_message_replaces_stage(self, mock_post):
        """Test a custom message is used as the stage text"""
        mock_post.return_value = twilio_response()
        notify_container_status_change(self.container.id, 'delayed', custom_message='bloqué au port')
        self.assertIn('bloqué au port', mock_post.call_args[1]['data']['Body'])

    @mock.patch('logistics.notifications.sms.requests.post')
    def test_failed_sms_does_not_cancel_emails(self, mock_post):
        """Test a failing channel is counted without stopping the others"""
        mock_post.return_value = twilio_response(ok=False, status_code=500)
        result = notify_container_status_change(self.container.id, 'arrived')
        self.assertEqual(result.emails_sent, 2)
        self.assertEqual(result.sms_sent, 0)
        self.assertEqual(result.failures[0]['channel'], 'sms')
        self.assertEqual(result.failures[0]['reason'], 'twilio_error')

    def test_unknown_container(self):
        """Test an unknown container yields no result"""
        self.assertIsNone(notify_container_status_change(99999, 'arrived'))

    def test_container_without_contacts(self):
        """Test an empty result when nobody can be reached"""
        empty = TestDataFactory.create_container()
        TestDataFactory.create_order(container=empty)
        result = notify_container_status_change(empty.id, 'arrived')
        self.assertEqual(result.as_dict(), {'emailsSent': 0, 'smsSent': 0, 'recipients': 0, 'failures': []})


class OrderNotificationTests(TestCase):
    """Test single order notifications"""

    def test_email_only(self):
        """Test an order without phone is notified by email"""
        order = TestDataFactory.create_order(client_email='jean@example.be')
        result = notify_order_status_change(order.id, 'completed')
        self.assertTrue(result.success)
        self.assertTrue(result.email_sent)
        self.assertFalse(result.sms_sent)
        self.assertEqual(len(mail.outbox), 1)

    def test_recipient_email_preferred(self):
        """Test the recipient email wins over the client email"""
        order = TestDataFactory.create_order(client_email='client@example.be', recipient_email='dest@example.be')
        notify_order_status_change(order.id, 'confirmed')
        self.assertEqual(mail.outbox[0].to, ['dest@example.be'])

    def test_missing_order(self):
        """Test an unknown order"""
        result = notify_order_status_change(99999, 'completed')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'Order not found')

    def test_missing_email(self):
        """Test an order without email cannot be notified"""
        order = TestDataFactory.create_order(client_email=None)
        result = notify_order_status_change(order.id, 'completed')
        self.assertEqual(result.error, 'Missing recipient email')

    @override_settings(EMAIL_BACKEND=SMTP_BACKEND, SMTP_HOST='', SMTP_USER='', SMTP_PASS='')
    def test_all_channels_failed(self):
        """Test the failure reasons are reported when nothing was sent"""
        order = TestDataFactory.create_order(client_email='jean@example.be')
        result = notify_order_status_change(order.id, 'completed')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'All channels failed (missing_config)')


class SchedulingTests(TestCase):
    """Test notifications are queued after commit"""

    @mock.patch('logistics.notifications.dispatch.get_background_executor')
    def test_order_notification_runs_after_commit(self, mock_executor):
        """Test nothing is queued before the transaction commits"""
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            schedule_order_notification(12, 'confirmed')
            mock_executor.return_value.submit.assert_not_called()
        self.assertEqual(len(callbacks), 1)
        mock_executor.return_value.submit.assert_called_once()

    @mock.patch('logistics.notifications.dispatch.get_background_executor')
    def test_container_notification_is_queued(self, mock_executor):
        """Test the container notification is queued once"""
        with self.captureOnCommitCallbacks(execute=True):
            schedule_container_notification(3, 'arrived', custom_message=None, previous_status='in_transit')
        mock_executor.return_value.submit.assert_called_once()


class NotificationApiTests(TestCase):
    """Test notification endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.container = TestDataFactory.create_container(status='departed')
        self.order = TestDataFactory.create_order(client_email='jean@example.be', container=self.container)

    def test_container_event(self):
        """Test a container event notifies its clients"""
        data = {'container_id': self.container.id, 'event': 'arrive'}
        response = self.client.post('/api/v1/notifications/container-event/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['emailsSent'], 1)

    def test_container_event_requires_fields(self):
        """Test container_id and event are mandatory"""
        response = self.client.post('/api/v1/notifications/container-event/', {'event': 'arrive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing container_id or event')

    def test_container_event_rejects_non_numeric_id(self):
        """Test a malformed container_id is a 400"""
        data = {'container_id': 'abc', 'event': 'arrive'}
        response = self.client.post('/api/v1/notifications/container-event/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'container_id invalide')

    def test_container_event_unknown_container(self):
        """Test an unknown container answers success with null data"""
        data = {'container_id': 99999, 'event': 'arrive'}
        response = self.client.post('/api/v1/notifications/container-event/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertIn('data', response.data)
        self.assertIsNone(response.data['data'])

    def test_container_status(self):
        """Test resending the container status"""
        response = self.client.post('/api/v1/notifications/container-status/', {'container_id': self.container.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['recipients'], 1)

    def test_container_status_unknown(self):
        """Test an unknown container returns 404"""
        response = self.client.post('/api/v1/notifications/container-status/', {'container_id': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_container_status_rejects_non_numeric_id(self):
        """Test a malformed container_id is a 400"""
        response = self.client.post('/api/v1/notifications/container-status/', {'container_id': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'container_id invalide')

    def test_order_status(self):
        """Test notifying an order"""
        response = self.client.post('/api/v1/notifications/order-status/', {'order_id': self.order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['email_sent'])

    def test_order_status_without_email(self):
        """Test a failed notification returns 502"""
        order = TestDataFactory.create_order(client_email=None)
        response = self.client.post('/api/v1/notifications/order-status/', {'order_id': order.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'Missing recipient email')

    def test_order_status_requires_id(self):
        """Test order_id is mandatory"""
        response = self.client.post('/api/v1/notifications/order-status/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_order_status_rejects_non_numeric_id(self):
        """Test a malformed order_id is a 400"""
        response = self.client.post('/api/v1/notifications/order-status/', {'order_id': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'order_id invalide')

    def test_send_status_email(self):
        """Test the ad-hoc status email"""
        data = {'to': 'jean@example.be', 'prenom': 'Jean', 'reference': 'DN1', 'stade': 'livrée', 'type': 'commande'}
        response = self.client.post('/api/v1/send-email/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Email sent')
        self.assertEqual(mail.outbox[0].subject, 'Bonne nouvelle ! Votre commande avance 🚚')

    def test_send_status_email_invalid_address(self):
        """Test the address is validated"""
        response = self.client.post('/api/v1/send-email/', {'to': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid email format')
