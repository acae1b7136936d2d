from rest_framework.throttling import UserRateThrottle


class BookingStatusThrottle(UserRateThrottle):
    """
    Limita los cambios de estado de reservas a 30 por minuto por usuario.
    """
    scope = 'booking_status'
