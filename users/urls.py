from django.urls import path
from .views import RecommendedProvidersView, RecommendedRequestsView

urlpatterns = [
    path('providers/recommended/', RecommendedProvidersView.as_view(), name='recommended-providers'),
    path('requests/recommended/', RecommendedRequestsView.as_view(), name='recommended-requests'),
]
