from rest_framework import permissions


class IsBookingParticipant(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        return (
            obj.requester == request.user or
            obj.provider.user == request.user
        )
