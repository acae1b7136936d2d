from django.urls import path
from .views import BookingStatusUpdateView

urlpatterns = [
    path('<int:pk>/status/', BookingStatusUpdateView.as_view(), name='booking-status-update'),
]
