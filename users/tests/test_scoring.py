"""
Tests unitarios de los scorers (content-based y collaborative).

No usan base de datos: los modelos se instancian en memoria.
"""

from decimal import Decimal

from django.test import SimpleTestCase

from bookings.models import Booking, ServiceRequest
from users.models import ProviderProfile, User
from users.services.scoring import (
    DEFAULT_COLLABORATIVE_SCORE,
    BookingHistory,
    score_collaborative,
    score_content,
    score_request_history,
    skill_match_ratio,
)


def make_provider(pk=1, skills=None, rating=0, reviews=0, years=0, jobs=0):
    user = User(email=f'provider{pk}@test.com', role=User.Role.SERVICE_PROVIDER, skills=skills or [])
    return ProviderProfile(
        id=pk,
        user=user,
        average_rating=Decimal(str(rating)),
        total_reviews=reviews,
        years_experience=years,
        total_jobs_completed=jobs,
    )


def make_request(pk=100, category='Plumbing', requester_id=50, status=ServiceRequest.Status.OPEN):
    return ServiceRequest(id=pk, service_category=category, requester_id=requester_id, status=status)


def make_booking(provider_id, requester_id, status, category=None):
    service_request = make_request(pk=None, category=category) if category else None
    return Booking(
        provider_id=provider_id,
        requester_id=requester_id,
        status=status,
        service_request=service_request,
    )


class SkillMatchRatioTestCase(SimpleTestCase):

    def test_substring_match_in_both_directions(self):
        self.assertEqual(skill_match_ratio(['Plumbing Repair'], 'plumbing'), 1.0)
        self.assertEqual(skill_match_ratio(['Plumb'], 'Plumbing'), 1.0)

    def test_partial_ratio(self):
        self.assertEqual(skill_match_ratio(['Plumbing', 'Electrical'], 'Plumbing'), 0.5)

    def test_empty_skills(self):
        self.assertEqual(skill_match_ratio([], 'Plumbing'), 0.0)


class ContentScoreTestCase(SimpleTestCase):
    """Tests de score_content"""

    def setUp(self):
        self.request = make_request(category='Plumbing')

    def test_score_always_in_unit_range(self):
        providers = [
            make_provider(skills=['Plumbing'], rating=5, reviews=500, years=40, jobs=900),
            make_provider(skills=['Cleaning'], rating=1, reviews=1, years=1, jobs=1),
            make_provider(skills=[]),
            make_provider(skills=['Plumbing', 'Electrical', 'Painting'], rating=3.3),
        ]
        for provider in providers:
            score = score_content(provider, self.request)
            self.assertGreaterEqual(score, 0.0)
            self.assertLessEqual(score, 1.0)

    def test_no_matching_skills_and_no_data_scores_zero(self):
        provider = make_provider(skills=['Cleaning'])
        self.assertEqual(score_content(provider, self.request), 0.0)

    def test_empty_skill_list_counts_as_present_factor(self):
        provider = make_provider(skills=[], rating=5)
        # skill 0 (peso 0.4) + rating 1.0 (peso 0.25)
        self.assertAlmostEqual(score_content(provider, self.request), 0.25 / 0.65, places=6)

    def test_no_factor_present_scores_zero(self):
        provider = make_provider(skills=['Plumbing'])
        self.assertEqual(score_content(provider, make_request(category='')), 0.0)

    def test_only_skill_factor_present(self):
        provider = make_provider(skills=['Plumbing'])
        self.assertEqual(score_content(provider, self.request), 1.0)

    def test_monotonic_in_positive_rating(self):
        previous = None
        for tenths in range(1, 51):
            provider = make_provider(skills=['Plumbing', 'Electrical'], rating=tenths / 10, reviews=4, years=2, jobs=3)
            score = score_content(provider, self.request)
            if previous is not None:
                self.assertGreaterEqual(score, previous)
            previous = score

    def test_reviews_saturate_at_ten(self):
        ten = score_content(make_provider(skills=['Plumbing'], reviews=10), self.request)
        hundred = score_content(make_provider(skills=['Plumbing'], reviews=100), self.request)
        self.assertAlmostEqual(ten, hundred)

    def test_two_provider_content_scores(self):
        """Proveedor con dos skills solo coincide en la mitad de ellos"""
        first = make_provider(pk=1, skills=['Plumbing', 'Electrical'], rating=4.8, reviews=25, years=5, jobs=30)
        second = make_provider(pk=2, skills=['Plumbing'], rating=4.2, reviews=10, years=3, jobs=15)

        self.assertAlmostEqual(score_content(first, self.request), 0.79, places=3)
        self.assertAlmostEqual(score_content(second, self.request), 0.895, places=3)

    def test_cleaning_request_against_plumber_scores_low(self):
        provider = make_provider(skills=['Plumbing', 'Electrical'], rating=4.8, reviews=25, years=5, jobs=30)
        cleaner = make_provider(pk=2, skills=['Cleaning'], rating=4.8, reviews=25, years=5, jobs=30)
        cleaning_request = make_request(category='Cleaning')

        plumber_score = score_content(provider, cleaning_request)
        self.assertLess(plumber_score, 0.6)
        self.assertLess(plumber_score, score_content(cleaner, cleaning_request))
        self.assertEqual(
            score_collaborative(provider, cleaning_request, [], []),
            DEFAULT_COLLABORATIVE_SCORE,
        )


class CollaborativeScoreTestCase(SimpleTestCase):
    """Tests de score_collaborative"""

    def setUp(self):
        self.provider = make_provider(pk=1, skills=['Plumbing'])
        self.request = make_request(category='Plumbing', requester_id=50)

    def test_default_without_history(self):
        self.assertEqual(score_collaborative(self.provider, self.request, [], []), 0.5)

    def test_success_rate_uses_completed_bookings_only(self):
        history = [
            make_booking(1, 60, Booking.Status.COMPLETED, 'Plumbing'),
            make_booking(1, 61, Booking.Status.COMPLETED, 'Cleaning'),
            make_booking(1, 62, Booking.Status.IN_PROGRESS, 'Plumbing'),
        ]
        self.assertAlmostEqual(score_collaborative(self.provider, self.request, [], history), 0.5)

    def test_success_rate_category_is_case_insensitive(self):
        history = [make_booking(1, 60, Booking.Status.COMPLETED, 'PLUMBING')]
        self.assertEqual(score_collaborative(self.provider, self.request, [], history), 1.0)

    def test_booking_without_request_does_not_match(self):
        history = [make_booking(1, 60, Booking.Status.COMPLETED)]
        self.assertEqual(score_collaborative(self.provider, self.request, [], history), 0.0)

    def test_population_popularity(self):
        similar = [
            make_request(pk=1, status=ServiceRequest.Status.COMPLETED),
            make_request(pk=2, status=ServiceRequest.Status.IN_PROGRESS),
            make_request(pk=3, status=ServiceRequest.Status.OPEN),
            make_request(pk=4, status=ServiceRequest.Status.CANCELLED),
        ]
        self.assertAlmostEqual(score_collaborative(self.provider, self.request, similar, []), 0.5)

    def test_requester_preference_counts_any_provider(self):
        history = [
            make_booking(7, 50, Booking.Status.COMPLETED, 'Cleaning'),
            make_booking(8, 50, Booking.Status.COMPLETED, 'Painting'),
            make_booking(9, 50, Booking.Status.IN_PROGRESS, 'Plumbing'),
        ]
        self.assertAlmostEqual(
            score_collaborative(self.provider, self.request, [], history), 2 / 3
        )

    def test_weighted_combination(self):
        history = [
            make_booking(1, 60, Booking.Status.COMPLETED, 'Plumbing'),
            make_booking(3, 50, Booking.Status.COMPLETED, 'Plumbing'),
        ]
        similar = [make_request(pk=1, status=ServiceRequest.Status.OPEN)]
        # (1.0 * 0.4 + 0.0 * 0.3 + 1.0 * 0.3) / 1.0
        self.assertAlmostEqual(
            score_collaborative(self.provider, self.request, similar, history), 0.7
        )

    def test_population_and_requester_signals_ignore_provider(self):
        other = make_provider(pk=2, skills=['Cleaning'])
        history = [make_booking(9, 50, Booking.Status.COMPLETED, 'Plumbing')]
        similar = [make_request(pk=1, status=ServiceRequest.Status.COMPLETED)]

        self.assertEqual(
            score_collaborative(self.provider, self.request, similar, history),
            score_collaborative(other, self.request, similar, history),
        )

    def test_accepts_prebuilt_history(self):
        bookings = [make_booking(1, 60, Booking.Status.COMPLETED, 'Plumbing')]
        self.assertEqual(
            score_collaborative(self.provider, self.request, [], BookingHistory(bookings)),
            score_collaborative(self.provider, self.request, [], bookings),
        )


class RequestHistoryScoreTestCase(SimpleTestCase):

    def test_completed_same_category_scores_high(self):
        bookings = [make_booking(1, 60, Booking.Status.COMPLETED, 'plumbing')]
        self.assertEqual(score_request_history(bookings, make_request(category='Plumbing')), 0.8)

    def test_in_progress_does_not_count(self):
        bookings = [make_booking(1, 60, Booking.Status.IN_PROGRESS, 'Plumbing')]
        self.assertEqual(score_request_history(bookings, make_request(category='Plumbing')), 0.5)

    def test_no_history(self):
        self.assertEqual(score_request_history([], make_request()), 0.5)
