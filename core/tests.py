"""
Tests for core app - staff accounts.
Tests cover: Model constraints, Role permissions, Login flow, Request logging.
"""
from types import SimpleNamespace

from django.test import TestCase
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APITestCase
from rest_framework import status

from core.permissions import IsAdminOrManager, IsManagerOrReadOnly
from core.serializers import UserLoginSerializer
from utils.testing import make_user

User = get_user_model()


# =============================================================================
# UNIT TESTS - Models
# =============================================================================

class UserModelTests(TestCase):
    """Test User model constraints and methods."""

    def test_create_user_with_email(self):
        user = User.objects.create_user(email='test@example.com', password='testpass123', name='Test User')

        self.assertEqual(user.email, 'test@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertEqual(user.role, User.Role.EMPLOYEE)
        self.assertFalse(user.is_manager)
        self.assertTrue(user.is_active)

    def test_email_domain_is_normalized(self):
        user = User.objects.create_user(email='Test@EXAMPLE.COM', password='test123', name='Test')
        # normalize_email only lowercases the domain part
        self.assertEqual(user.email, 'Test@example.com')

    def test_email_is_unique(self):
        User.objects.create_user(email='unique@example.com', password='test123', name='First User')

        with self.assertRaises(Exception):
            User.objects.create_user(email='unique@example.com', password='test123', name='Second User')

    def test_create_user_without_email_raises_error(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='test123', name='Test')

    def test_create_superuser_is_admin(self):
        user = User.objects.create_superuser(email='admin@example.com', password='admin123', name='Admin')

        self.assertTrue(user.is_superuser)
        self.assertTrue(user.is_staff)
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.is_manager)

    def test_manager_role(self):
        self.assertTrue(make_user(User.Role.MANAGER).is_manager)
        self.assertFalse(make_user(User.Role.DRIVER).is_manager)

    def test_short_name(self):
        user = make_user(User.Role.MANAGER)
        self.assertEqual(user.get_short_name(), 'Test')
        self.assertEqual(str(user), 'manager@example.com')


# =============================================================================
# UNIT TESTS - Permissions
# =============================================================================

class RolePermissionTests(TestCase):

    def request(self, method, user):
        return SimpleNamespace(method=method, user=user)

    def test_admin_or_manager(self):
        permission = IsAdminOrManager()
        self.assertTrue(permission.has_permission(self.request('GET', make_user(User.Role.ADMIN)), None))
        self.assertFalse(permission.has_permission(self.request('GET', make_user(User.Role.EMPLOYEE)), None))
        self.assertFalse(permission.has_permission(self.request('GET', AnonymousUser()), None))

    def test_manager_or_read_only(self):
        permission = IsManagerOrReadOnly()
        clerk = make_user(User.Role.EMPLOYEE)
        manager = make_user(User.Role.MANAGER)

        self.assertTrue(permission.has_permission(self.request('GET', clerk), None))
        self.assertFalse(permission.has_permission(self.request('POST', clerk), None))
        self.assertTrue(permission.has_permission(self.request('DELETE', manager), None))
        self.assertFalse(permission.has_permission(self.request('GET', AnonymousUser()), None))


class LoginSerializerTests(TestCase):

    def test_login_invalid_credentials(self):
        User.objects.create_user(email='test@example.com', password='correctpass', name='Test')

        serializer = UserLoginSerializer(data={'email': 'test@example.com', 'password': 'wrongpass'})

        self.assertFalse(serializer.is_valid())

    def test_login_email_is_case_insensitive(self):
        User.objects.create_user(email='test@example.com', password='correctpass', name='Test')

        serializer = UserLoginSerializer(data={'email': 'TEST@example.com', 'password': 'correctpass'})

        self.assertTrue(serializer.is_valid())

    def test_disabled_account_rejected(self):
        User.objects.create_user(email='gone@example.com', password='correctpass', name='Gone', is_active=False)

        serializer = UserLoginSerializer(data={'email': 'gone@example.com', 'password': 'correctpass'})

        self.assertFalse(serializer.is_valid())


# =============================================================================
# INTEGRATION TESTS - API Flow
# =============================================================================

class AuthenticationAPITests(APITestCase):
    """Integration tests for authentication flow."""

    def setUp(self):
        make_user(User.Role.MANAGER, email='flowtest@example.com', password='FlowPass123!')

    def test_login_returns_jwt_tokens(self):
        response = self.client.post('/api/login/', {
            'email': 'flowtest@example.com',
            'password': 'FlowPass123!'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data['tokens'])
        self.assertIn('refresh', response.data['tokens'])
        self.assertEqual(response.data['user']['role'], 'Manager')

    def test_login_wrong_password(self):
        response = self.client.post('/api/login/', {
            'email': 'flowtest@example.com',
            'password': 'nope'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_full_auth_flow(self):
        """Login -> access protected route -> refresh token."""
        login_response = self.client.post('/api/login/', {
            'email': 'flowtest@example.com',
            'password': 'FlowPass123!'
        }, format='json')
        tokens = login_response.data['tokens']

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        profile_response = self.client.get('/api/profile/')
        self.assertEqual(profile_response.status_code, status.HTTP_200_OK)
        self.assertEqual(profile_response.data['email'], 'flowtest@example.com')

        self.client.credentials()
        refresh_response = self.client.post('/api/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(refresh_response.status_code, status.HTTP_200_OK)
        self.assertIn('access', refresh_response.data)

    def test_protected_route_without_token(self):
        response = self.client.get('/api/profile/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_protected_route_with_invalid_token(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer invalid_token_here')
        response = self.client.get('/api/profile/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_failed_request_logged_as_warning(self):
        with self.assertLogs('busops.api', level='WARNING') as logs:
            self.client.get('/api/profile/')
        self.assertIn('GET /api/profile/ -> 401', logs.output[0])

    def test_api_root(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('endpoints', response.json())


class StaffAccountAPITests(APITestCase):
    """Account administration is limited to admins."""

    def setUp(self):
        self.admin = make_user(User.Role.ADMIN)
        self.manager = make_user(User.Role.MANAGER)
        self.client.force_authenticate(user=self.admin)

    def test_admin_creates_account(self):
        response = self.client.post('/api/users/', {
            'email': 'New.Clerk@Example.com',
            'name': 'New Clerk',
            'role': 'Employee',
            'password': 'Str0ng-Passw0rd!',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['email'], 'new.clerk@example.com')
        self.assertFalse(response.data['is_manager'])
        self.assertTrue(User.objects.get(email='new.clerk@example.com').check_password('Str0ng-Passw0rd!'))

    def test_duplicate_email_rejected(self):
        response = self.client.post('/api/users/', {
            'email': 'manager@example.com', 'name': 'Copy', 'role': 'Manager', 'password': 'Str0ng-Passw0rd!',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_weak_password_rejected(self):
        response = self.client.post('/api/users/', {
            'email': 'weak@example.com', 'name': 'Weak', 'role': 'Employee', 'password': '123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_change_role_and_disable(self):
        response = self.client.patch(f'/api/users/{self.manager.pk}/', {
            'role': 'Employee', 'is_active': False,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.manager.refresh_from_db()
        self.assertEqual(self.manager.role, User.Role.EMPLOYEE)
        self.assertFalse(self.manager.is_active)

    def test_admin_cannot_disable_self(self):
        response = self.client.patch(f'/api/users/{self.admin.pk}/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manager_cannot_manage_accounts(self):
        self.client.force_authenticate(user=self.manager)

        self.assertEqual(self.client.get('/api/users/').status_code, status.HTTP_403_FORBIDDEN)

    def test_list_accounts(self):
        response = self.client.get('/api/users/')
        self.assertEqual(response.data['count'], 2)
