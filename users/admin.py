from django.contrib import admin, messages

from .exceptions import SkillConsistencyError
from .models import ProviderProfile, ServiceType, Skill, User, UserSkill
from .services.skill_consistency import repair_user_skill_sync


class UserSkillInline(admin.TabularInline):
    model = UserSkill
    extra = 0
    autocomplete_fields = ['skill']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin interface for User model."""

    list_display = ['id', 'email', 'role', 'skills', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff', 'date_joined']
    search_fields = ['email', 'first_name', 'last_name']
    readonly_fields = ['date_joined', 'skills']
    ordering = ['-date_joined']
    filter_horizontal = ['service_types']
    inlines = [UserSkillInline]
    actions = ['repair_skill_sync']

    fieldsets = (
        ('Account Info', {
            'fields': ('email', 'password', 'role')
        }),
        ('Personal Info', {
            'fields': ('first_name', 'last_name')
        }),
        ('Skills', {
            'fields': ('skills', 'service_types')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser')
        }),
        ('Timestamps', {
            'fields': ('date_joined',)
        }),
    )

    @admin.action(description='Reparar sincronización de skills')
    def repair_skill_sync(self, request, queryset):
        repaired = 0
        for user in queryset:
            try:
                repair_user_skill_sync(user)
                repaired += 1
            except SkillConsistencyError as e:
                self.message_user(request, f"{user.email}: {e}", level=messages.ERROR)
        self.message_user(request, f"{repaired} usuarios reparados")


@admin.register(ServiceType)
class ServiceTypeAdmin(admin.ModelAdmin):
    list_display = ['id', 'name']
    search_fields = ['name']


@admin.register(Skill)
class SkillAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'service_type', 'is_active']
    list_filter = ['service_type', 'is_active']
    search_fields = ['name']


@admin.register(ProviderProfile)
class ProviderProfileAdmin(admin.ModelAdmin):
    """Admin interface for ProviderProfile model."""

    list_display = [
        'id', 'user', 'years_experience', 'availability',
        'is_verified', 'average_rating', 'total_reviews', 'total_jobs_completed'
    ]
    list_filter = ['availability', 'is_verified']
    search_fields = ['user__email', 'user__first_name', 'user__last_name', 'bio']
    readonly_fields = ['average_rating', 'total_reviews']

    fieldsets = (
        ('Provider Info', {
            'fields': ('user', 'bio')
        }),
        ('Experience & Rates', {
            'fields': ('years_experience', 'hourly_rate', 'availability', 'total_jobs_completed')
        }),
        ('Verification & Rating', {
            'fields': ('is_verified', 'average_rating', 'total_reviews')
        }),
    )
