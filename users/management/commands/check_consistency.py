"""
Management command para revisar la consistencia de los datos.

Verifica:
    - Sincronización de skills (arreglo legado vs. entradas estructuradas)
    - Ratings fuera de rango
    - Skills sin tipo de servicio
    - Reservas sin solicitud asociada
    - Solicitudes expiradas que siguen abiertas u ofertadas

Usage:
    python manage.py check_consistency
    python manage.py check_consistency --fix  # Repara lo que se puede reparar
"""

from django.core.management.base import BaseCommand
from django.db.models import Q

from bookings.models import Booking, ServiceRequest
from bookings.ratings import rebuild_all_provider_ratings
from users.exceptions import SkillConsistencyError
from users.models import ProviderProfile, Skill, User
from users.services.skill_consistency import bulk_consistency_check, repair_user_skill_sync
import logging

logger = logging.getLogger(__name__)

EXPIRED_CANCELLATION_REASON = 'Expired automatically by system maintenance'


class Command(BaseCommand):
    help = 'Revisa la consistencia de skills, ratings, reservas y solicitudes'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Repara skills desincronizados, ratings inválidos y solicitudes expiradas',
        )

    def handle(self, *args, **options):
        fix = options['fix']

        self.stdout.write(self.style.WARNING('=' * 70))
        self.stdout.write(self.style.WARNING('Revisión de Consistencia de Datos'))
        self.stdout.write(self.style.WARNING('=' * 70 + '\n'))

        issues = {
            'skill_sync': self._check_skill_sync(fix),
            'invalid_ratings': self._check_ratings(fix),
            'orphaned_skills': self._check_orphaned_skills(),
            'invalid_bookings': self._check_bookings(),
            'expired_requests': self._check_expired_requests(fix),
        }

        total_issues = sum(issues.values())
        logger.info(f"Consistency check finished: {total_issues} issues {issues}")

        self.stdout.write('\n' + '=' * 70)
        if total_issues:
            self.stdout.write(self.style.WARNING(f'Total de problemas encontrados: {total_issues}'))
        else:
            self.stdout.write(self.style.SUCCESS('✓ Sin problemas de consistencia'))

    def _check_skill_sync(self, fix: bool) -> int:
        self.stdout.write(self.style.HTTP_INFO('\nSincronización de skills:'))
        self.stdout.write('-' * 70)

        providers = User.objects.filter(role=User.Role.SERVICE_PROVIDER)
        report = bulk_consistency_check(providers)
        failing_ids = [error['user_id'] for error in report['errors']]

        if not failing_ids:
            self.stdout.write(self.style.SUCCESS(f"✓ {report['consistent']} proveedores consistentes"))
            return 0

        self.stdout.write(
            self.style.ERROR(f"✗ Skills desincronizados: {len(failing_ids)} de {report['total']} proveedores")
        )

        if fix:
            repaired = 0
            for user in User.objects.filter(pk__in=failing_ids):
                try:
                    repair_user_skill_sync(user)
                    repaired += 1
                except SkillConsistencyError as e:
                    self.stdout.write(self.style.ERROR(f'  - {user.email}: {e}'))
            self.stdout.write(self.style.SUCCESS(f'✓ {repaired} proveedores reparados'))

        return len(failing_ids)

    def _check_ratings(self, fix: bool) -> int:
        self.stdout.write(self.style.HTTP_INFO('\nRatings:'))
        self.stdout.write('-' * 70)

        invalid = ProviderProfile.objects.filter(
            Q(average_rating__lt=0) | Q(average_rating__gt=5)
        ).count()

        if not invalid:
            self.stdout.write(self.style.SUCCESS('✓ Todos los ratings están en rango'))
            return 0

        self.stdout.write(self.style.ERROR(f'✗ Ratings fuera de rango: {invalid} proveedores'))
        if fix:
            changed = rebuild_all_provider_ratings()
            self.stdout.write(self.style.SUCCESS(f'✓ Ratings recalculados ({changed} cambiaron)'))
        return invalid

    def _check_orphaned_skills(self) -> int:
        self.stdout.write(self.style.HTTP_INFO('\nSkills sin tipo de servicio:'))
        self.stdout.write('-' * 70)

        orphaned = Skill.objects.filter(service_type__isnull=True)
        count = orphaned.count()
        if count:
            names = ', '.join(orphaned.values_list('name', flat=True)[:5])
            self.stdout.write(self.style.WARNING(f'⚠ {count} skills huérfanos: {names}'))
        else:
            self.stdout.write(self.style.SUCCESS('✓ Todos los skills tienen tipo de servicio'))
        return count

    def _check_bookings(self) -> int:
        self.stdout.write(self.style.HTTP_INFO('\nReservas:'))
        self.stdout.write('-' * 70)

        count = Booking.objects.filter(service_request__isnull=True).count()
        if count:
            self.stdout.write(self.style.WARNING(f'⚠ {count} reservas sin solicitud asociada'))
        else:
            self.stdout.write(self.style.SUCCESS('✓ Todas las reservas tienen solicitud'))
        return count

    def _check_expired_requests(self, fix: bool) -> int:
        self.stdout.write(self.style.HTTP_INFO('\nSolicitudes expiradas:'))
        self.stdout.write('-' * 70)

        expired = ServiceRequest.objects.expired()
        count = expired.count()
        if not count:
            self.stdout.write(self.style.SUCCESS('✓ No hay solicitudes expiradas activas'))
            return 0

        self.stdout.write(self.style.ERROR(f'✗ {count} solicitudes expiradas siguen activas'))
        if fix:
            fixed = expired.update(
                status=ServiceRequest.Status.CANCELLED,
                cancellation_reason=EXPIRED_CANCELLATION_REASON,
            )
            self.stdout.write(self.style.SUCCESS(f'✓ {fixed} solicitudes canceladas'))
        return count
