"""
Excepciones de dominio de SkillConnect.

Ambas heredan de ValueError: los llamadores que ya capturan errores de
validación genéricos siguen funcionando sin cambios.
"""


class SkillConsistencyError(ValueError):
    """Los datos de skills de un usuario no cumplen las invariantes de sincronización."""

    def __init__(self, message, user_id=None):
        super().__init__(message)
        self.user_id = user_id


class InvalidTransitionError(ValueError):
    """Transición de estado no permitida para una reserva o solicitud."""

    def __init__(self, current, new, valid):
        self.current = current
        self.new = new
        self.valid = sorted(valid)
        valid_display = ', '.join(self.valid) or 'none'
        super().__init__(
            f"Invalid transition: {current} → {new}. Valid: {valid_display}"
        )
