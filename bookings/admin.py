from django.contrib import admin
from .models import Booking, Review, ServiceRequest


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'service_category', 'requester', 'status', 'expires_at', 'created_at']
    list_filter = ['status', 'service_category', 'created_at']
    search_fields = ['title', 'service_category', 'requester__email']
    ordering = ['-created_at']


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'requester', 'provider', 'service_request', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['requester__email', 'provider__user__email']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'booking', 'rating', 'created_at']
    list_filter = ['rating']
    readonly_fields = ['created_at']
