"""Service layer — business rules between the HTTP routers and the DAOs."""


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found (-> HTTP 404)."""


class ConflictError(ServiceError):
    """Uniqueness or state conflict (-> HTTP 409)."""


class ValidationError(ServiceError):
    """Input rejected by a business rule (-> HTTP 422)."""


class AuthenticationError(ServiceError):
    """Authentication failure (-> HTTP 401)."""


def pick_updates(updates: dict, allowed: frozenset[str], nullable: frozenset[str]) -> dict:
    """Keep the whitelisted keys of *updates*, including explicit ``None``.

    ``None`` clears a nullable column. Raises :class:`ValidationError` when
    ``None`` is sent for a column that cannot be cleared.
    """
    values = {k: v for k, v in updates.items() if k in allowed}
    required = sorted(k for k, v in values.items() if v is None and k not in nullable)
    if required:
        raise ValidationError(f"{', '.join(required)} cannot be null")
    return values
