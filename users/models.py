from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.validators import MaxValueValidator, MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from .managers import CustomUserManager


class User(AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        ADMIN = "ADMIN", _("Administrator")
        COMMUNITY_MEMBER = "COMMUNITY_MEMBER", _("Community Member")
        SERVICE_PROVIDER = "SERVICE_PROVIDER", _("Service Provider")

    email = models.EmailField(unique=True)
    first_name = models.CharField(_("First Name"), max_length=150, blank=True)
    last_name = models.CharField(_("Last Name"), max_length=150, blank=True)
    role = models.CharField(max_length=50, choices=Role.choices, default=Role.COMMUNITY_MEMBER)

    # Arreglo legado de nombres de skills; se mantiene sincronizado con skills_with_service
    skills = models.JSONField(_("Skills"), default=list, blank=True)
    service_types = models.ManyToManyField(
        'users.ServiceType',
        blank=True,
        related_name='users',
        verbose_name=_("Service Types")
    )

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    def __str__(self):
        return f"{self.email} ({self.role})"

    @property
    def is_provider(self):
        return self.role == self.Role.SERVICE_PROVIDER


class ServiceType(models.Model):
    name = models.CharField(_("Name"), max_length=100, unique=True)
    description = models.TextField(_("Description"), blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Skill(models.Model):
    name = models.CharField(_("Name"), max_length=100)
    service_type = models.ForeignKey(
        ServiceType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='skills',
        verbose_name=_("Service Type")
    )
    description = models.TextField(_("Description"), blank=True)
    is_active = models.BooleanField(_("Active"), default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class UserSkill(models.Model):
    """Entrada estructurada de skill (skillsWithService) de un usuario."""

    class Proficiency(models.TextChoices):
        BEGINNER = 'BEGINNER', _('Beginner')
        INTERMEDIATE = 'INTERMEDIATE', _('Intermediate')
        ADVANCED = 'ADVANCED', _('Advanced')
        EXPERT = 'EXPERT', _('Expert')

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='skills_with_service'
    )
    skill = models.ForeignKey(
        Skill,
        on_delete=models.CASCADE,
        related_name='user_skills'
    )
    years_of_experience = models.PositiveIntegerField(_("Years of Experience"), default=0)
    proficiency = models.CharField(
        max_length=20,
        choices=Proficiency.choices,
        default=Proficiency.INTERMEDIATE
    )
    added_at = models.DateTimeField(_("Added At"), default=timezone.now)

    class Meta:
        ordering = ['added_at', 'id']

    def __str__(self):
        return f"{self.user.email} - {self.skill.name}"


class ProviderProfile(models.Model):
    class Availability(models.TextChoices):
        AVAILABLE = 'AVAILABLE', _('Available')
        CURRENTLY_WORKING = 'CURRENTLY_WORKING', _('Currently Working')
        NOT_AVAILABLE = 'NOT_AVAILABLE', _('Not Available')

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='provider_profile')
    bio = models.TextField(_("Biography"), blank=True)
    years_experience = models.PositiveIntegerField(_("Years of Experience"), default=0)
    hourly_rate = models.DecimalField(_("Hourly Rate"), max_digits=10, decimal_places=2, null=True, blank=True)
    availability = models.CharField(
        _("Availability"),
        max_length=20,
        choices=Availability.choices,
        default=Availability.AVAILABLE
    )
    is_verified = models.BooleanField(_("Verified"), default=False)
    average_rating = models.DecimalField(
        _("Average Rating"),
        max_digits=3,
        decimal_places=2,
        default=0.0,
        validators=[MinValueValidator(0), MaxValueValidator(5)]
    )
    total_reviews = models.PositiveIntegerField(_("Total Reviews"), default=0)
    total_jobs_completed = models.PositiveIntegerField(_("Total Jobs Completed"), default=0)

    def __str__(self):
        return f"Perfil de {self.user.email}"

    @property
    def skills(self):
        return self.user.skills
