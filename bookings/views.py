from rest_framework import generics, permissions
from rest_framework.response import Response

from .models import Booking
from .permissions import IsBookingParticipant
from .serializers import BookingSerializer, BookingStatusSerializer
from .throttles import BookingStatusThrottle


class BookingStatusUpdateView(generics.UpdateAPIView):
    """
    PATCH /api/bookings/<id>/status/

    Cambia el estado de una reserva según la tabla de transiciones.
    Solo el solicitante o el proveedor de la reserva.
    """
    queryset = Booking.objects.select_related('requester', 'provider', 'provider__user')
    serializer_class = BookingStatusSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingParticipant]
    throttle_classes = [BookingStatusThrottle]
    http_method_names = ['patch', 'options']

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)

        full_serializer = BookingSerializer(instance)
        return Response(full_serializer.data)
