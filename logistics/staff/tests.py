"""
Test suite for Staff module
Tests: Employee CRUD with login accounts, admin-only access, activities
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status

from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.staff.models import Employee, EmployeeActivity
from logistics.staff.services import account_role

User = get_user_model()


class EmployeeTests(TestCase):
    """Test employee endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.payload = {
            'name': 'Sophie Mukendi',
            'email': 'Sophie.Mukendi@Danemo.be',
            'role': 'manager',
            'salary': '3200.00',
            'position': "Responsable d'entrepôt",
            'hire_date': '2024-02-01',
        }

    def test_operator_is_refused(self):
        """Test non-admin users cannot manage employees"""
        operator = TestDataFactory.create_user(role='operator')
        self.client.authenticate_user(operator)
        response = self.client.get('/api/v1/employees/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_create_employee_with_temporary_password(self):
        """Test creating an employee creates its login account"""
        response = self.client.post('/api/v1/employees/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['email'], 'sophie.mukendi@danemo.be')
        self.assertEqual(len(data['temporary_password']), 12)

        user = User.objects.get(username='sophie.mukendi@danemo.be')
        self.assertTrue(user.check_password(data['temporary_password']))
        self.assertEqual(user.role, 'operator')
        self.assertEqual(user.first_name, 'Sophie')
        employee = Employee.objects.get(id=data['id'])
        self.assertTrue(employee.activities.filter(activity_type='login').exists())

    def test_create_employee_with_password(self):
        """Test a provided password is used and not echoed"""
        self.payload['password'] = 'chosen-pass-99'
        self.payload['role'] = 'admin'
        response = self.client.post('/api/v1/employees/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('temporary_password', response.data['data'])
        user = User.objects.get(username='sophie.mukendi@danemo.be')
        self.assertTrue(user.check_password('chosen-pass-99'))
        self.assertEqual(user.role, 'admin')

    def test_create_employee_missing_field(self):
        """Test every required field is checked"""
        del self.payload['salary']
        response = self.client.post('/api/v1/employees/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Le champ salary est requis')

    def test_create_employee_existing_account(self):
        """Test an existing login account for the email returns 409"""
        TestDataFactory.create_user(username='sophie.mukendi@danemo.be')
        response = self.client.post('/api/v1/employees/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(Employee.objects.filter(email='sophie.mukendi@danemo.be').exists())

    def test_list_employees_filters(self):
        """Test role, active and search filters"""
        TestDataFactory.create_employee(name='Driver One', role='driver')
        inactive = TestDataFactory.create_employee(name='Operator Two', role='operator')
        inactive.is_active = False
        inactive.save()
        response = self.client.get('/api/v1/employees/?role=driver')
        self.assertEqual([e['name'] for e in response.data['data']], ['Driver One'])
        response = self.client.get('/api/v1/employees/?is_active=false')
        self.assertEqual([e['name'] for e in response.data['data']], ['Operator Two'])
        response = self.client.get('/api/v1/employees/?search=driver')
        self.assertEqual(len(response.data['data']), 1)

    def test_update_syncs_account(self):
        """Test updating an employee updates its login account"""
        employee = TestDataFactory.create_employee(name='Paul Kalala')
        data = {'name': 'Paul Kalala', 'email': 'paul.new@danemo.be', 'role': 'admin', 'password': 'new-pass-123'}
        response = self.client.put(f'/api/v1/employees/{employee.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        employee.user.refresh_from_db()
        self.assertEqual(employee.user.email, 'paul.new@danemo.be')
        self.assertEqual(employee.user.username, 'paul.new@danemo.be')
        self.assertEqual(employee.user.role, 'admin')
        self.assertTrue(employee.user.check_password('new-pass-123'))

    def test_update_requires_name_and_email(self):
        """Test name and email are required on update"""
        employee = TestDataFactory.create_employee()
        response = self.client.put(f'/api/v1/employees/{employee.id}/', {'role': 'driver'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Nom et email sont requis')

    def test_delete_removes_account(self):
        """Test deleting an employee deletes its login account"""
        employee = TestDataFactory.create_employee()
        user_id = employee.user_id
        response = self.client.delete(f'/api/v1/employees/{employee.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Employee.objects.filter(id=employee.id).exists())
        self.assertFalse(User.objects.filter(id=user_id).exists())

    def test_employee_not_found(self):
        """Test an unknown employee returns 404"""
        response = self.client.get('/api/v1/employees/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_account_role(self):
        """Test only admins get the admin account role"""
        self.assertEqual(account_role('admin'), 'admin')
        self.assertEqual(account_role('manager'), 'operator')
        self.assertEqual(account_role('driver'), 'operator')


class EmployeeActivityTests(TestCase):
    """Test employee activities"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.employee = TestDataFactory.create_employee()

    def test_record_activity(self):
        """Test recording an activity"""
        data = {'activity_type': 'order_created', 'description': 'Commande DN2026000001', 'metadata': {'order_id': 1}}
        response = self.client.post(f'/api/v1/employees/{self.employee.id}/activities/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['employee_id'], self.employee.id)

    def test_list_activities_with_limit_and_type(self):
        """Test limit and type filters"""
        for _ in range(3):
            EmployeeActivity.objects.create(employee=self.employee, activity_type='login')
        EmployeeActivity.objects.create(employee=self.employee, activity_type='logout')
        response = self.client.get(f'/api/v1/employees/{self.employee.id}/activities/?limit=2')
        self.assertEqual(len(response.data['data']), 2)
        response = self.client.get(f'/api/v1/employees/{self.employee.id}/activities/?type=logout')
        self.assertEqual(len(response.data['data']), 1)

    def test_invalid_activity_type(self):
        """Test unknown activity types are rejected"""
        response = self.client.post(f'/api/v1/employees/{self.employee.id}/activities/', {'activity_type': 'nap'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
