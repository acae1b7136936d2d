"""
Tests de integración para los endpoints del sistema de recomendación.

Cubre:
    - GET /api/users/providers/recommended/
    - GET /api/users/requests/recommended/
    - Autenticación y permisos
    - Fallback cuando el motor falla
"""

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from users.tests.test_recommendation_engine import RecommendationTestMixin

User = get_user_model()


class RecommendedProvidersAPITestCase(RecommendationTestMixin, TestCase):
    """Tests de integración para proveedores recomendados."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.url = reverse('recommended-providers')

        self.requester = User.objects.create_user(
            email='cliente@test.com',
            password='test123',
            role='COMMUNITY_MEMBER'
        )
        self.client.force_authenticate(user=self.requester)

        self.plumber = self.create_provider('plumber@test.com', ['Plumbing'], rating='4.20', reviews=10, years=3, jobs=15)
        self.electrician = self.create_provider('electrician@test.com', ['Electrical'], rating='4.90', reviews=40, years=8, jobs=50)
        self.service_request = self.create_request(self.requester, 'Plumbing')

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_without_request_returns_top_rated(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['strategy_used'], 'top_rated')
        ids = [item['id'] for item in response.data['recommendations']]
        self.assertEqual(ids, [self.electrician.id, self.plumber.id])

    def test_recommendations_for_request(self):
        response = self.client.get(self.url, {'service_request': self.service_request.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['strategy_used'], 'hybrid')
        self.assertEqual(response.data['service_request'], self.service_request.id)
        self.assertFalse(response.data['fallback'])

        first = response.data['recommendations'][0]
        self.assertEqual(first['id'], self.plumber.id)
        for field in ['recommendation_score', 'content_based_score',
                      'collaborative_score', 'recommendation_reason', 'skills', 'user']:
            self.assertIn(field, first)
        self.assertIn('Strong skill match', first['recommendation_reason'])

    def test_min_score_and_limit_params(self):
        response = self.client.get(self.url, {
            'service_request': self.service_request.id,
            'min_score': 0.9,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_results'], 0)

        response = self.client.get(self.url, {
            'service_request': self.service_request.id,
            'min_score': 0,
            'limit': 1,
        })
        self.assertEqual(response.data['total_results'], 1)

    def test_unknown_request_returns_404(self):
        response = self.client.get(self.url, {'service_request': 99999})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_params_return_400(self):
        response = self.client.get(self.url, {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('limit', response.data)

        response = self.client.get(self.url, {'min_score': 2})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('users.views.recommendation_views.logger')
    @patch('users.services.recommendation_engine.RecommendationEngine.recommend_workers_for')
    def test_engine_error_returns_500(self, mock_recommend, mock_logger):
        mock_recommend.side_effect = RuntimeError('database unavailable')

        response = self.client.get(self.url, {'service_request': self.service_request.id})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Internal server error')
        mock_logger.exception.assert_called_once()


class RecommendedRequestsAPITestCase(RecommendationTestMixin, TestCase):
    """Tests de integración para solicitudes recomendadas."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.url = reverse('recommended-requests')

        self.requester = User.objects.create_user(
            email='cliente@test.com',
            password='test123',
            role='COMMUNITY_MEMBER'
        )
        self.provider = self.create_provider('plumber@test.com', ['Plumbing'])
        self.plumbing = self.create_request(self.requester, 'Plumbing')
        self.cleaning = self.create_request(self.requester, 'Cleaning')

    def test_community_member_forbidden(self):
        self.client.force_authenticate(user=self.requester)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_provider_gets_matching_requests(self):
        self.client.force_authenticate(user=self.provider.user)
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['fallback'])
        items = response.data['recommendations']
        self.assertEqual([item['id'] for item in items], [self.plumbing.id])
        self.assertEqual(items[0]['match_reason'], 'Matches your skills')
        self.assertAlmostEqual(items[0]['recommendation_score'], 0.8)

    @patch('users.views.recommendation_views.logger')
    @patch('users.services.recommendation_engine.RecommendationEngine.recommend_requests_for')
    def test_engine_error_falls_back_to_open_requests(self, mock_recommend, mock_logger):
        mock_recommend.side_effect = RuntimeError('boom')
        self.client.force_authenticate(user=self.provider.user)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['fallback'])
        ids = [item['id'] for item in response.data['recommendations']]
        self.assertEqual(ids, [self.cleaning.id, self.plumbing.id])
        self.assertNotIn('match_reason', response.data['recommendations'][0])
        mock_logger.exception.assert_called_once()
