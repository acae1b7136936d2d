"""
Tablas de transición de estado para reservas y solicitudes de servicio.

Predicados puros: la ruta de escritura los consulta antes de guardar.
Un estado ausente de la tabla no tiene transiciones válidas.
"""

from typing import FrozenSet

from users.exceptions import InvalidTransitionError

from .models import Booking, ServiceRequest

BookingStatus = Booking.Status
RequestStatus = ServiceRequest.Status


BOOKING_TRANSITIONS = {
    BookingStatus.ACCEPTED: frozenset({
        BookingStatus.IN_PROGRESS,
        BookingStatus.CANCELLED,
        BookingStatus.DECLINED,
    }),
    BookingStatus.IN_PROGRESS: frozenset({
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.DECLINED: frozenset(),
}

REQUEST_TRANSITIONS = {
    RequestStatus.OPEN: frozenset({
        RequestStatus.OFFERED,
        RequestStatus.IN_PROGRESS,
        RequestStatus.CANCELLED,
    }),
    RequestStatus.OFFERED: frozenset({
        RequestStatus.IN_PROGRESS,
        RequestStatus.CANCELLED,
    }),
    RequestStatus.IN_PROGRESS: frozenset({
        RequestStatus.COMPLETED,
        RequestStatus.CANCELLED,
    }),
    RequestStatus.COMPLETED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}


def get_valid_booking_transitions(current: str) -> FrozenSet[str]:
    return BOOKING_TRANSITIONS.get(current, frozenset())


def can_transition_booking_status(current: str, new: str) -> bool:
    return new in get_valid_booking_transitions(current)


def get_valid_request_transitions(current: str) -> FrozenSet[str]:
    return REQUEST_TRANSITIONS.get(current, frozenset())


def can_transition_request_status(current: str, new: str) -> bool:
    return new in get_valid_request_transitions(current)


def assert_booking_transition(current: str, new: str) -> None:
    """
    Lanza InvalidTransitionError si la transición no está en la tabla.

    El mensaje incluye los estados siguientes válidos.
    """
    if not can_transition_booking_status(current, new):
        raise InvalidTransitionError(current, new, get_valid_booking_transitions(current))
