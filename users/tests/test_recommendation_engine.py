"""
Tests del RecommendationEngine contra la base de datos.

Cubre:
    - Elegibilidad de proveedores (verificado, activo, disponibilidad)
    - Escenario de dos plomeros con historial
    - Pool vacío
    - Recomendación inversa (solicitudes para un proveedor)
    - Puntuación en paralelo
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from bookings.models import Booking, ServiceRequest
from users.models import ProviderProfile
from users.services import RecommendationEngine

User = get_user_model()


class RecommendationTestMixin:
    """Helpers compartidos para crear proveedores y solicitudes."""

    def create_provider(self, email, skills, rating='0.00', reviews=0, years=0, jobs=0,
                        verified=True, availability=ProviderProfile.Availability.AVAILABLE):
        user = User.objects.create_user(
            email=email,
            password='test123',
            role='SERVICE_PROVIDER',
        )
        user.skills = skills
        user.save(update_fields=['skills'])

        # Perfil auto-creado por signal
        profile = ProviderProfile.objects.get(user=user)
        profile.average_rating = Decimal(rating)
        profile.total_reviews = reviews
        profile.years_experience = years
        profile.total_jobs_completed = jobs
        profile.is_verified = verified
        profile.availability = availability
        profile.save()
        return profile

    def create_request(self, requester, category, title=None, status=ServiceRequest.Status.OPEN, **kwargs):
        return ServiceRequest.objects.create(
            requester=requester,
            title=title or f'{category} service',
            service_category=category,
            status=status,
            **kwargs
        )


class RecommendWorkersTestCase(RecommendationTestMixin, TestCase):
    """Tests de recommend_workers_for"""

    def setUp(self):
        self.requester = User.objects.create_user(
            email='requester@test.com',
            password='test123',
            role='COMMUNITY_MEMBER',
        )
        self.other_requester = User.objects.create_user(
            email='other@test.com',
            password='test123',
            role='COMMUNITY_MEMBER',
        )

        self.worker1 = self.create_provider(
            'worker1@test.com', ['Plumbing', 'Electrical'],
            rating='4.80', reviews=25, years=5, jobs=30,
        )
        self.worker2 = self.create_provider(
            'worker2@test.com', ['Plumbing'],
            rating='4.20', reviews=10, years=3, jobs=15,
        )
        self.worker3 = self.create_provider(
            'worker3@test.com', ['Cleaning'],
            rating='3.50', reviews=5, years=1, jobs=5,
        )

        self.service_request = self.create_request(self.requester, 'Plumbing', title='Test Plumbing Service')
        self.engine = RecommendationEngine()

    def _add_plumbing_history(self):
        """Trabajo previo de plomería completado por worker1 + dos solicitudes abiertas."""
        previous = self.create_request(
            self.other_requester, 'Plumbing',
            title='Previous Plumbing Work',
            status=ServiceRequest.Status.COMPLETED,
        )
        Booking.objects.create(
            requester=self.other_requester,
            provider=self.worker1,
            service_request=previous,
            status=Booking.Status.COMPLETED,
        )
        self.create_request(self.other_requester, 'Plumbing', title='Leaking pipe')
        self.create_request(self.other_requester, 'Plumbing', title='Clogged drain')

    def test_experienced_plumber_with_history_ranks_first(self):
        """✅ worker1 supera a worker2 con historial de plomería; worker3 queda fuera"""
        self._add_plumbing_history()

        results = self.engine.recommend_workers_for(self.service_request, limit=10, min_score=0.5)
        ids = [r.entity.id for r in results]

        self.assertEqual(ids, [self.worker1.id, self.worker2.id])
        self.assertGreater(results[0].hybrid_score, results[1].hybrid_score)
        self.assertNotIn(self.worker3.id, ids)

    def test_scores_are_exposed_per_candidate(self):
        self._add_plumbing_history()

        results = self.engine.recommend_workers_for(self.service_request, min_score=0.0)
        first = results[0]

        self.assertAlmostEqual(first.content_score, 0.79, places=3)
        self.assertAlmostEqual(first.collaborative_score, (0.4 + 0.3 / 3) / 0.7, places=3)
        self.assertAlmostEqual(
            first.hybrid_score,
            0.6 * first.content_score + 0.4 * first.collaborative_score,
        )
        self.assertIn('Excellent ratings', first.reason)
        self.assertIn('Experienced provider', first.reason)

    def test_similar_requests_ignore_category_padding(self):
        """Una categoría con espacios y otra capitalización encuentra las solicitudes similares"""
        self._add_plumbing_history()
        self.service_request.service_category = ' plumbing '
        self.service_request.save(update_fields=['service_category'])

        results = {r.entity.id: r for r in self.engine.recommend_workers_for(self.service_request, min_score=0.0)}

        self.assertAlmostEqual(
            results[self.worker1.id].collaborative_score, (0.4 + 0.3 / 3) / 0.7, places=3
        )

    def test_collaborative_defaults_without_history(self):
        results = self.engine.recommend_workers_for(self.service_request, min_score=0.0)
        for result in results:
            self.assertEqual(result.collaborative_score, 0.5)

    def test_unverified_and_inactive_providers_excluded(self):
        self.worker2.is_verified = False
        self.worker2.save()
        self.worker3.user.is_active = False
        self.worker3.user.save()

        ids = [r.entity.id for r in self.engine.recommend_workers_for(self.service_request, min_score=0.0)]

        self.assertEqual(ids, [self.worker1.id])

    def test_not_available_excluded_unless_requested(self):
        self.worker2.availability = ProviderProfile.Availability.NOT_AVAILABLE
        self.worker2.save()

        default_ids = [r.entity.id for r in self.engine.recommend_workers_for(self.service_request, min_score=0.0)]
        all_ids = [
            r.entity.id for r in self.engine.recommend_workers_for(
                self.service_request, min_score=0.0, include_unavailable=True
            )
        ]

        self.assertNotIn(self.worker2.id, default_ids)
        self.assertIn(self.worker2.id, all_ids)

    def test_currently_working_providers_included(self):
        self.worker2.availability = ProviderProfile.Availability.CURRENTLY_WORKING
        self.worker2.save()

        ids = [r.entity.id for r in self.engine.recommend_workers_for(self.service_request, min_score=0.0)]

        self.assertIn(self.worker2.id, ids)

    def test_empty_provider_pool_returns_empty_list(self):
        User.objects.filter(role='SERVICE_PROVIDER').delete()

        self.assertEqual(self.engine.recommend_workers_for(self.service_request), [])

    def test_limit(self):
        results = self.engine.recommend_workers_for(self.service_request, limit=1, min_score=0.0)
        self.assertEqual(len(results), 1)

    def test_parallel_scoring_matches_sequential(self):
        self._add_plumbing_history()

        sequential = self.engine.recommend_workers_for(self.service_request, min_score=0.0)
        parallel = RecommendationEngine(workers=4).recommend_workers_for(self.service_request, min_score=0.0)

        self.assertEqual(
            [(r.entity.id, r.hybrid_score) for r in sequential],
            [(r.entity.id, r.hybrid_score) for r in parallel],
        )

    @patch('users.services.recommendation_engine.logger')
    def test_logs_summary(self, mock_logger):
        self.engine.recommend_workers_for(self.service_request)

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args[0][0]
        self.assertIn('candidates=3', call_args)

    def test_top_rated_providers(self):
        providers = list(self.engine.top_rated_providers(limit=2))
        self.assertEqual([p.id for p in providers], [self.worker1.id, self.worker2.id])


class RecommendRequestsTestCase(RecommendationTestMixin, TestCase):
    """Tests de recommend_requests_for"""

    def setUp(self):
        self.requester = User.objects.create_user(
            email='requester@test.com',
            password='test123',
            role='COMMUNITY_MEMBER',
        )
        self.provider = self.create_provider('plumber@test.com', ['Plumbing'])

        self.plumbing = self.create_request(self.requester, 'Plumbing')
        self.cleaning = self.create_request(self.requester, 'Cleaning')
        self.expired = self.create_request(
            self.requester, 'Plumbing',
            expires_at=timezone.now() - timedelta(hours=1),
        )
        self.offered = self.create_request(self.requester, 'Plumbing', status=ServiceRequest.Status.OFFERED)
        self.engine = RecommendationEngine()

    def test_matching_open_request_ranked_above_cutoff(self):
        """✅ La solicitud de plomería aparece; la de limpieza queda bajo el mínimo"""
        results = self.engine.recommend_requests_for(self.provider)
        ids = [r.entity.id for r in results]

        self.assertEqual(ids, [self.plumbing.id])
        self.assertEqual(results[0].reason, 'Matches your skills')

    def test_non_matching_request_ranked_lower_without_cutoff(self):
        results = self.engine.recommend_requests_for(self.provider, min_score=0.0)
        ids = [r.entity.id for r in results]

        self.assertEqual(ids, [self.plumbing.id, self.cleaning.id])
        self.assertNotIn(self.expired.id, ids)
        self.assertNotIn(self.offered.id, ids)

    def test_completed_history_in_category_boosts_collaborative(self):
        previous = self.create_request(self.requester, 'plumbing', status=ServiceRequest.Status.COMPLETED)
        Booking.objects.create(
            requester=self.requester,
            provider=self.provider,
            service_request=previous,
            status=Booking.Status.COMPLETED,
        )

        results = {r.entity.id: r for r in self.engine.recommend_requests_for(self.provider, min_score=0.0)}

        self.assertEqual(results[self.plumbing.id].collaborative_score, 0.8)
        self.assertEqual(results[self.cleaning.id].collaborative_score, 0.5)
        self.assertEqual(
            results[self.plumbing.id].reason,
            'Matches your skills, Similar to your completed work',
        )
        self.assertEqual(results[self.cleaning.id].reason, 'Good match for your profile')

    def test_no_open_requests(self):
        ServiceRequest.objects.all().delete()
        self.assertEqual(self.engine.recommend_requests_for(self.provider), [])
