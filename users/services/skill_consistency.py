"""
Validación y reparación de la consistencia de skills de un usuario.

Cada usuario guarda sus skills dos veces:
    - ``skills``: arreglo legado de nombres (lo que consume el motor de recomendación)
    - ``skills_with_service``: entradas estructuradas (UserSkill) con referencia al catálogo

Las funciones de validación y sincronización son puras: operan sobre un
snapshot en memoria (``UserSkillData``) y nunca tocan la base de datos.
Las funciones de reparación y mutación (``repair_user_skill_sync``,
``add_skill``, ``remove_skill``) validan el resultado antes de guardar y
lanzan ``SkillConsistencyError`` en lugar de persistir datos inconsistentes.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from django.db import DatabaseError, transaction
from django.utils import timezone

from users.exceptions import SkillConsistencyError
from users.models import Skill, User, UserSkill

logger = logging.getLogger(__name__)

MIN_PROVIDER_SKILLS = 1
MAX_PROVIDER_SKILLS = 3


@dataclass(frozen=True)
class UnresolvedSkill:
    """Referencia a un skill del catálogo cuyo nombre aún no se conoce."""
    id: Any


@dataclass(frozen=True)
class ResolvedSkill:
    id: Any
    name: str
    service_type_id: Optional[Any] = None


SkillRef = Union[UnresolvedSkill, ResolvedSkill]


@dataclass(frozen=True)
class SkillEntry:
    skill: SkillRef
    years_of_experience: int = 0
    proficiency: str = UserSkill.Proficiency.INTERMEDIATE
    added_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserSkillData:
    """Snapshot inmutable de los datos de skills de un usuario."""
    user_id: Any
    role: str
    skills: List[str] = field(default_factory=list)
    skills_with_service: List[SkillEntry] = field(default_factory=list)
    service_types: List[Any] = field(default_factory=list)

    @classmethod
    def from_user(cls, user: User) -> 'UserSkillData':
        """Construye el snapshot desde el ORM; todas las referencias quedan resueltas."""
        entries = []
        service_types = []
        if user.pk is not None:
            for user_skill in user.skills_with_service.select_related('skill'):
                entries.append(SkillEntry(
                    skill=resolve_skill(user_skill.skill),
                    years_of_experience=user_skill.years_of_experience,
                    proficiency=user_skill.proficiency,
                    added_at=user_skill.added_at,
                ))
            service_types = list(user.service_types.values_list('id', flat=True))

        return cls(
            user_id=user.pk,
            role=user.role,
            skills=list(user.skills or []),
            skills_with_service=entries,
            service_types=service_types,
        )


def resolve_skill(skill: Skill) -> ResolvedSkill:
    return ResolvedSkill(id=skill.pk, name=skill.name, service_type_id=skill.service_type_id)


# ============================================================================
# VALIDACIÓN (pura)
# ============================================================================

def validate_user_skill_consistency(user_data: UserSkillData) -> bool:
    """
    Verifica las invariantes de skills de un usuario.

    Checks (en orden, se detiene en el primer fallo):
        1. Ambos arreglos tienen la misma longitud
        2. Cada entrada estructurada tiene su nombre en el arreglo legado
           (una referencia no resuelta cuenta como fallo)
        3. No hay skills duplicados en el arreglo estructurado
        4. Cardinalidad según rol: proveedor 1-3 skills, miembro 0

    Returns:
        True si es consistente. Nunca lanza excepciones; el llamador decide
        si el fallo es fatal.
    """
    skills = list(user_data.skills or [])
    entries = list(user_data.skills_with_service or [])

    if len(skills) != len(entries):
        logger.error(
            f"CONSISTENCY ERROR: skill array length mismatch for user {user_data.user_id} "
            f"(legacy={len(skills)}, structured={len(entries)})"
        )
        return False

    for entry in entries:
        ref = entry.skill
        if not isinstance(ref, ResolvedSkill):
            logger.error(
                f"CONSISTENCY ERROR: unresolved skill reference {getattr(ref, 'id', ref)} "
                f"for user {user_data.user_id}"
            )
            return False
        if ref.name not in skills:
            logger.error(
                f"CONSISTENCY ERROR: skill '{ref.name}' missing in legacy array "
                f"for user {user_data.user_id}"
            )
            return False

    skill_ids = [entry.skill.id for entry in entries]
    if len(set(skill_ids)) != len(skill_ids):
        logger.error(
            f"CONSISTENCY ERROR: duplicate skills in structured array for user "
            f"{user_data.user_id}: {skill_ids}"
        )
        return False

    if user_data.role == User.Role.SERVICE_PROVIDER:
        if not MIN_PROVIDER_SKILLS <= len(skills) <= MAX_PROVIDER_SKILLS:
            logger.error(
                f"CONSISTENCY ERROR: provider {user_data.user_id} has {len(skills)} skills "
                f"(allowed {MIN_PROVIDER_SKILLS}-{MAX_PROVIDER_SKILLS})"
            )
            return False
    elif user_data.role == User.Role.COMMUNITY_MEMBER:
        if len(skills) != 0:
            logger.error(
                f"CONSISTENCY ERROR: community member {user_data.user_id} has "
                f"{len(skills)} skills"
            )
            return False

    return True


# ============================================================================
# SINCRONIZACIÓN (pura)
# ============================================================================

def sync_skills_from_service_types(
    user_data: UserSkillData,
    skill_catalog: Mapping[Any, ResolvedSkill],
) -> UserSkillData:
    """
    Reconstruye ``skills`` y ``service_types`` a partir de las entradas estructuradas.

    Las referencias no resueltas se resuelven con ``skill_catalog``; las que no
    aparecen en el catálogo quedan sin resolver y no aportan nombre, de modo que
    la validación posterior falla. Idempotente: aplicar dos veces da el mismo
    resultado.
    """
    entries = []
    skill_names = []
    service_types = []

    for entry in user_data.skills_with_service:
        ref = entry.skill
        if isinstance(ref, UnresolvedSkill) and ref.id in skill_catalog:
            ref = skill_catalog[ref.id]
            entry = replace(entry, skill=ref)
        entries.append(entry)

        if not isinstance(ref, ResolvedSkill):
            continue
        if ref.name not in skill_names:
            skill_names.append(ref.name)
        if ref.service_type_id is not None and ref.service_type_id not in service_types:
            service_types.append(ref.service_type_id)

    return replace(
        user_data,
        skills=skill_names,
        skills_with_service=entries,
        service_types=service_types,
    )


# ============================================================================
# OPERACIONES SOBRE EL ORM
# ============================================================================

def check_user_consistency(user: User) -> bool:
    return validate_user_skill_consistency(UserSkillData.from_user(user))


def bulk_consistency_check(users: Iterable[User]) -> Dict[str, Any]:
    """
    Valida un lote de usuarios.

    Returns:
        {'total', 'consistent', 'inconsistent', 'errors': [{'user_id', 'type', ...}]}
    """
    report = {'total': 0, 'consistent': 0, 'inconsistent': 0, 'errors': []}

    for user in users:
        report['total'] += 1
        try:
            is_consistent = check_user_consistency(user)
        except DatabaseError as e:
            logger.exception(f"Error checking skill consistency for user {user.pk}")
            report['errors'].append({'user_id': user.pk, 'type': 'error', 'message': str(e)})
            continue

        if is_consistent:
            report['consistent'] += 1
        else:
            report['inconsistent'] += 1
            report['errors'].append({'user_id': user.pk, 'type': 'inconsistent'})

    return report


def _persist_legacy_arrays(user: User, user_data: UserSkillData) -> None:
    user.skills = list(user_data.skills)
    user.save(update_fields=['skills'])
    user.service_types.set(user_data.service_types)


@transaction.atomic
def repair_user_skill_sync(user: User) -> User:
    """
    Reconstruye el arreglo legado y los service types desde el arreglo estructurado.

    Raises:
        SkillConsistencyError: si los datos reconstruidos siguen siendo
        inconsistentes (p.ej. duplicados o cardinalidad). En ese caso no se guarda nada.
    """
    logger.info(f"Repairing skills for user {user.pk}")
    original_count = len(user.skills or [])

    repaired = sync_skills_from_service_types(UserSkillData.from_user(user), {})
    if not validate_user_skill_consistency(repaired):
        raise SkillConsistencyError("Repair validation failed", user_id=user.pk)

    _persist_legacy_arrays(user, repaired)
    logger.info(
        f"Repaired user {user.pk}: {original_count} → {len(repaired.skills)} skills"
    )
    return user


@transaction.atomic
def add_skill(
    user: User,
    skill: Skill,
    years_of_experience: int = 0,
    proficiency: str = UserSkill.Proficiency.INTERMEDIATE,
) -> UserSkill:
    """Agrega un skill a ambos arreglos; valida antes de escribir."""
    if not skill.is_active:
        raise SkillConsistencyError(f"Skill '{skill.name}' is inactive", user_id=user.pk)

    current = UserSkillData.from_user(user)
    if len(current.skills_with_service) >= MAX_PROVIDER_SKILLS:
        raise SkillConsistencyError(
            f"Max {MAX_PROVIDER_SKILLS} skills per provider", user_id=user.pk
        )
    if any(entry.skill.id == skill.pk for entry in current.skills_with_service):
        raise SkillConsistencyError(
            f"Skill '{skill.name}' already assigned", user_id=user.pk
        )

    added_at = timezone.now()
    new_entry = SkillEntry(
        skill=resolve_skill(skill),
        years_of_experience=years_of_experience,
        proficiency=proficiency,
        added_at=added_at,
    )
    service_types = list(current.service_types)
    if skill.service_type_id is not None and skill.service_type_id not in service_types:
        service_types.append(skill.service_type_id)

    updated = replace(
        current,
        skills=current.skills + ([skill.name] if skill.name not in current.skills else []),
        skills_with_service=current.skills_with_service + [new_entry],
        service_types=service_types,
    )
    if not validate_user_skill_consistency(updated):
        raise SkillConsistencyError("Consistency validation failed", user_id=user.pk)

    user_skill = UserSkill.objects.create(
        user=user,
        skill=skill,
        years_of_experience=years_of_experience,
        proficiency=proficiency,
        added_at=added_at,
    )
    _persist_legacy_arrays(user, updated)
    logger.info(f"Skill '{skill.name}' added to user {user.pk}")
    return user_skill


@transaction.atomic
def remove_skill(user: User, skill: Skill) -> User:
    """Quita un skill de ambos arreglos; valida antes de escribir."""
    current = UserSkillData.from_user(user)
    remaining = [entry for entry in current.skills_with_service if entry.skill.id != skill.pk]

    remaining_service_types = {
        entry.skill.service_type_id
        for entry in remaining
        if isinstance(entry.skill, ResolvedSkill)
    }
    service_types = [
        st for st in current.service_types
        if st != skill.service_type_id or st in remaining_service_types
    ]

    updated = replace(
        current,
        skills=[name for name in current.skills if name != skill.name],
        skills_with_service=remaining,
        service_types=service_types,
    )
    if not validate_user_skill_consistency(updated):
        raise SkillConsistencyError(
            "Consistency validation failed after removal", user_id=user.pk
        )

    UserSkill.objects.filter(user=user, skill=skill).delete()
    _persist_legacy_arrays(user, updated)
    logger.info(f"Skill '{skill.name}' removed from user {user.pk}")
    return user
