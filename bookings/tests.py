from datetime import timedelta
from decimal import Decimal
from itertools import product
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from users.exceptions import InvalidTransitionError
from users.models import ProviderProfile

from .models import Booking, Review, ServiceRequest
from .ratings import rebuild_all_provider_ratings
from .transitions import (
    assert_booking_transition,
    can_transition_booking_status,
    can_transition_request_status,
    get_valid_booking_transitions,
    get_valid_request_transitions,
)

User = get_user_model()


class TransitionTableTestCase(SimpleTestCase):
    """Tests de las tablas de transición"""

    def test_booking_predicate_matches_transition_set(self):
        statuses = Booking.Status.values + ['UNKNOWN']
        for current, new in product(statuses, statuses):
            self.assertEqual(
                can_transition_booking_status(current, new),
                new in get_valid_booking_transitions(current),
            )

    def test_booking_terminal_statuses(self):
        for terminal in ['COMPLETED', 'CANCELLED', 'DECLINED']:
            self.assertEqual(get_valid_booking_transitions(terminal), frozenset())

    def test_booking_transitions(self):
        self.assertTrue(can_transition_booking_status('ACCEPTED', 'IN_PROGRESS'))
        self.assertTrue(can_transition_booking_status('IN_PROGRESS', 'COMPLETED'))
        self.assertFalse(can_transition_booking_status('ACCEPTED', 'COMPLETED'))
        self.assertFalse(can_transition_booking_status('IN_PROGRESS', 'DECLINED'))

    def test_applied_and_unknown_have_no_transitions(self):
        self.assertEqual(get_valid_booking_transitions('APPLIED'), frozenset())
        self.assertEqual(get_valid_booking_transitions('NOPE'), frozenset())
        self.assertFalse(can_transition_booking_status('NOPE', 'ACCEPTED'))

    def test_request_transitions(self):
        self.assertTrue(can_transition_request_status('OPEN', 'OFFERED'))
        self.assertTrue(can_transition_request_status('OFFERED', 'IN_PROGRESS'))
        self.assertFalse(can_transition_request_status('COMPLETED', 'OPEN'))
        self.assertEqual(get_valid_request_transitions('CANCELLED'), frozenset())

    def test_assert_booking_transition(self):
        assert_booking_transition('ACCEPTED', 'IN_PROGRESS')

        with self.assertRaises(InvalidTransitionError) as ctx:
            assert_booking_transition('ACCEPTED', 'COMPLETED')

        self.assertEqual(ctx.exception.valid, ['CANCELLED', 'DECLINED', 'IN_PROGRESS'])
        self.assertIn('Valid: CANCELLED, DECLINED, IN_PROGRESS', str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    def test_assert_terminal_transition_message(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            assert_booking_transition('COMPLETED', 'CANCELLED')
        self.assertIn('Valid: none', str(ctx.exception))


class BookingTestMixin:

    def create_booking_fixture(self):
        self.requester = User.objects.create_user(
            email='cliente_test@test.com',
            password='password123',
            role='COMMUNITY_MEMBER',
        )
        self.provider_user = User.objects.create_user(
            email='provider_test@test.com',
            password='password123',
            role='SERVICE_PROVIDER',
        )
        # Perfil auto-creado por signal
        self.provider = ProviderProfile.objects.get(user=self.provider_user)
        self.service_request = ServiceRequest.objects.create(
            requester=self.requester,
            title='Fix sink',
            service_category='Plumbing',
        )

    def create_booking(self, booking_status=Booking.Status.ACCEPTED):
        return Booking.objects.create(
            requester=self.requester,
            provider=self.provider,
            service_request=self.service_request,
            status=booking_status,
        )


class ServiceRequestQuerySetTestCase(BookingTestMixin, TestCase):

    def setUp(self):
        self.create_booking_fixture()

    def test_expired_only_returns_stale_open_or_offered_requests(self):
        past = timezone.now() - timedelta(hours=1)
        stale_open = ServiceRequest.objects.create(
            requester=self.requester, title='Old leak', service_category='Plumbing', expires_at=past,
        )
        stale_offered = ServiceRequest.objects.create(
            requester=self.requester, title='Old wiring', service_category='Electrical',
            status=ServiceRequest.Status.OFFERED, expires_at=past,
        )
        ServiceRequest.objects.create(
            requester=self.requester, title='Done', service_category='Plumbing',
            status=ServiceRequest.Status.COMPLETED, expires_at=past,
        )

        expired_ids = set(ServiceRequest.objects.expired().values_list('id', flat=True))

        self.assertEqual(expired_ids, {stale_open.id, stale_offered.id})
        self.assertNotIn(self.service_request.id, expired_ids)


class BookingStatusAPITestCase(BookingTestMixin, TestCase):
    """Tests del endpoint PATCH /api/bookings/<id>/status/"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.create_booking_fixture()
        self.booking = self.create_booking()
        self.url = reverse('booking-status-update', args=[self.booking.id])

    def test_valid_transition(self):
        self.client.force_authenticate(user=self.provider_user)

        response = self.client.patch(self.url, {'status': 'IN_PROGRESS'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'IN_PROGRESS')
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.IN_PROGRESS)

    def test_invalid_transition_lists_valid_statuses(self):
        self.client.force_authenticate(user=self.requester)

        response = self.client.patch(self.url, {'status': 'COMPLETED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        message = str(response.data['status'][0])
        self.assertIn('Cannot transition from ACCEPTED to COMPLETED', message)
        self.assertIn('CANCELLED, DECLINED, IN_PROGRESS', message)

    def test_completing_booking_increments_jobs_completed(self):
        self.booking.status = Booking.Status.IN_PROGRESS
        self.booking.save()
        self.client.force_authenticate(user=self.requester)

        response = self.client.patch(
            self.url,
            {'status': 'COMPLETED', 'completion_notes': 'All good'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.provider.refresh_from_db()
        self.assertEqual(self.provider.total_jobs_completed, 1)

    def test_non_participant_forbidden(self):
        outsider = User.objects.create_user(email='outsider@test.com', password='password123')
        self.client.force_authenticate(user=outsider)

        response = self.client.patch(self.url, {'status': 'CANCELLED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.ACCEPTED)

    def test_requires_authentication(self):
        response = self.client.patch(self.url, {'status': 'CANCELLED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ReviewSignalTestCase(BookingTestMixin, TestCase):
    """Tests unitarios para los signals de Review"""

    def setUp(self):
        self.create_booking_fixture()

    @patch('bookings.signals.logger')
    def test_signal_recalculates_rating_on_first_review(self, mock_logger):
        """✅ Signal calcula rating correctamente con la primera review"""
        booking = self.create_booking(Booking.Status.COMPLETED)

        self.assertEqual(self.provider.average_rating, Decimal('0.00'))

        Review.objects.create(booking=booking, rating=5, comment='Excelente trabajo')

        self.provider.refresh_from_db()
        self.assertEqual(self.provider.average_rating, Decimal('5.00'))
        self.assertEqual(self.provider.total_reviews, 1)

        mock_logger.info.assert_called_once()
        self.assertIn('rating actualizado', mock_logger.info.call_args[0][0])

    def test_signal_recalculates_average_with_multiple_reviews(self):
        """✅ Signal calcula promedio correctamente con múltiples reviews"""
        for rating in [5, 4, 4]:
            Review.objects.create(booking=self.create_booking(Booking.Status.COMPLETED), rating=rating)

        self.provider.refresh_from_db()
        self.assertEqual(self.provider.average_rating, Decimal('4.33'))
        self.assertEqual(self.provider.total_reviews, 3)

    def test_signal_resets_rating_when_last_review_deleted(self):
        review = Review.objects.create(booking=self.create_booking(Booking.Status.COMPLETED), rating=3)

        review.delete()

        self.provider.refresh_from_db()
        self.assertEqual(self.provider.average_rating, Decimal('0.00'))
        self.assertEqual(self.provider.total_reviews, 0)

    def test_rebuild_all_provider_ratings(self):
        Review.objects.create(booking=self.create_booking(Booking.Status.COMPLETED), rating=4)
        ProviderProfile.objects.filter(pk=self.provider.pk).update(
            average_rating=Decimal('1.00'), total_reviews=9
        )

        changed = rebuild_all_provider_ratings()

        self.assertEqual(changed, 1)
        self.provider.refresh_from_db()
        self.assertEqual(self.provider.average_rating, Decimal('4.00'))
        self.assertEqual(self.provider.total_reviews, 1)
