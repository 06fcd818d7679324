from __future__ import annotations

from flask import has_request_context, request, session

SUPPORTED_LANGS = {"es", "en"}
DEFAULT_LANG = "es"

I18N: dict[str, dict[str, str]] = {
    "BAD_REQUEST": {"es": "Solicitud inválida", "en": "Bad request"},
    "UNAUTHORIZED": {"es": "Autenticación requerida", "en": "Authentication required"},
    "FORBIDDEN": {"es": "Acceso denegado", "en": "Forbidden"},
    "NOT_FOUND": {"es": "Recurso no encontrado", "en": "Not found"},
    "INTERNAL_ERROR": {"es": "Error interno", "en": "Internal error"},
    "INVALID_CREDENTIALS": {"es": "Credenciales inválidas", "en": "Invalid credentials"},
    "NO_ACTIVE_ORGANIZATION": {"es": "No hay organización activa", "en": "No active organization"},
    "NO_ACTIVE_SITE": {"es": "No hay sede activa", "en": "No active site"},
    "ORG_NOT_CEMETERY": {"es": "La organización no es un cementerio", "en": "Organization is not a cemetery"},
    "ORG_NOT_FUNERAL": {"es": "La organización no es una funeraria", "en": "Organization is not a funeral home"},
    "DUPLICATE": {"es": "Ya existe un registro con esos datos", "en": "A record with those values already exists"},
    "NODE_IN_USE": {
        "es": "Hay espacios ocupados o difuntos registrados bajo este elemento",
        "en": "Occupied spaces or deceased records exist under this node",
    },
    "SITE_NOT_FOUND": {"es": "Sede no encontrada", "en": "Site not found"},
    "AREA_NOT_FOUND": {"es": "Área no encontrada", "en": "Area not found"},
    "SECTOR_NOT_FOUND": {"es": "Sector no encontrado", "en": "Sector not found"},
    "SUBSECTOR_NOT_FOUND": {"es": "Subsector no encontrado", "en": "Subsector not found"},
    "PLOT_NOT_FOUND": {"es": "Sepultura no encontrada", "en": "Plot not found"},
    "SPACE_NOT_FOUND": {"es": "Espacio no encontrado", "en": "Space not found"},
    "PLOT_TYPE_NOT_FOUND": {"es": "Tipo de sepultura no encontrado", "en": "Plot type not found"},
    "SPACE_OCCUPIED": {"es": "El espacio ya está ocupado", "en": "Space is already occupied"},
    "SPACE_LOCKED": {"es": "El espacio está bloqueado", "en": "Space is locked"},
    "INVALID_STATUS": {"es": "Estado inválido", "en": "Invalid status"},
    "REQUEST_NOT_FOUND": {"es": "Solicitud de sepultación no encontrada", "en": "Burial request not found"},
    "REQUEST_NOT_APPROVED": {
        "es": "La solicitud debe estar aprobada antes de asignar",
        "en": "Request must be approved before assignment",
    },
    "SITE_MISMATCH": {
        "es": "La solicitud pertenece a otra sede",
        "en": "Request belongs to a different site",
    },
    "DECEASED_NOT_FOUND": {"es": "Difunto no encontrado", "en": "Deceased record not found"},
    "CEMETERY_ORG_NOT_FOUND": {"es": "Cementerio no encontrado", "en": "Cemetery not found"},
    "CEMETERY_SITE_NOT_FOUND": {"es": "Sede del cementerio no encontrada", "en": "Cemetery site not found"},
    "INVALID_CEMETERY_ORG": {"es": "La organización indicada no es un cementerio", "en": "Target is not a cemetery"},
    "INVALID_CEMETERY": {"es": "Cementerio o sede inválidos", "en": "Invalid cemetery or site"},
    "REQUEST_ALREADY_ASSIGNED": {
        "es": "La solicitud ya tiene sepultura asignada",
        "en": "Request already has an assigned space",
    },
    "NAME_REQUIRED": {"es": "El nombre es obligatorio", "en": "Name is required"},
    "AREA_NAME_REQUIRED": {"es": "El nombre del área es obligatorio", "en": "Area name is required"},
    "SECTOR_NAME_REQUIRED": {"es": "El nombre del sector es obligatorio", "en": "Sector name is required"},
    "SUBSECTOR_NAME_REQUIRED": {"es": "El nombre del subsector es obligatorio", "en": "Subsector name is required"},
    "FULL_NAME_REQUIRED": {"es": "El nombre completo es obligatorio", "en": "Full name is required"},
    "DECEASED_NAME_REQUIRED": {"es": "El nombre del difunto es obligatorio", "en": "Deceased name is required"},
    "DATE_OF_DEATH_REQUIRED": {"es": "La fecha de defunción es obligatoria", "en": "Date of death is required"},
    "CEMETERY_REQUIRED": {"es": "Debe indicar el cementerio", "en": "Cemetery is required"},
    "CEMETERY_SITE_REQUIRED": {"es": "Debe indicar la sede", "en": "Cemetery site is required"},
    "SITE_ID_REQUIRED": {"es": "Debe indicar la sede", "en": "Site id is required"},
    "ORG_ID_REQUIRED": {"es": "Debe indicar la organización", "en": "Organization id is required"},
    "PLOT_AND_SPACE_REQUIRED": {"es": "Debe indicar sepultura y espacio", "en": "Plot and space are required"},
    "PLOT_TYPE_AND_CODE_REQUIRED": {
        "es": "Tipo y código de sepultura son obligatorios",
        "en": "Plot type and code are required",
    },
    "INVALID_DATE": {"es": "Fecha inválida", "en": "Invalid date"},
    "INVALID_IS_ACTIVE": {"es": "Valor de activo inválido", "en": "is_active must be a boolean"},
    "INVALID_IDS": {"es": "Identificadores inválidos", "en": "Invalid identifiers"},
}


def get_locale() -> str:
    if not has_request_context():
        return DEFAULT_LANG
    lang = session.get("lang")
    if lang in SUPPORTED_LANGS:
        return lang
    return request.accept_languages.best_match(sorted(SUPPORTED_LANGS)) or DEFAULT_LANG


def translate(key: str) -> str:
    lang = get_locale()
    return I18N.get(key, {}).get(lang, key)
