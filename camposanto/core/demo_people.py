from __future__ import annotations

import re

DEMO_FIRST_NAMES_CL: tuple[str, ...] = (
    "José",
    "Juan",
    "Luis",
    "Carlos",
    "Jorge",
    "Manuel",
    "Pedro",
    "Francisco",
    "Sergio",
    "Héctor",
    "Patricio",
    "Raúl",
    "María",
    "Ana",
    "Carmen",
    "Rosa",
    "Margarita",
    "Isabel",
    "Patricia",
    "Gloria",
    "Teresa",
    "Marta",
    "Eliana",
    "Ximena",
)

DEMO_LAST_NAMES_CL: tuple[str, ...] = (
    "González",
    "Muñoz",
    "Rojas",
    "Díaz",
    "Pérez",
    "Soto",
    "Contreras",
    "Silva",
    "Martínez",
    "Sepúlveda",
    "Morales",
    "Rodríguez",
    "López",
    "Fuentes",
    "Hernández",
    "Torres",
    "Araya",
    "Flores",
    "Espinoza",
    "Valenzuela",
)

GENERIC_NAME_TOKENS_BLOCKLIST: tuple[str, ...] = (
    "DEMO",
    "TEST",
    "DIFUNTO",
)

_GENERIC_NUMERIC_PATTERN = re.compile(r"\d{2,}")


def is_generic_demo_name(first_name: str, last_name: str) -> bool:
    full_name = f"{(first_name or '').strip()} {(last_name or '').strip()}".strip()
    full_name_upper = full_name.upper()
    for token in GENERIC_NAME_TOKENS_BLOCKLIST:
        if token in full_name_upper:
            return True
    return bool(_GENERIC_NUMERIC_PATTERN.search(full_name))


def generate_demo_names(total: int, offset: int = 0) -> list[tuple[str, str]]:
    """Deterministic first name / two-surname pairs for seeded deceased records."""
    if total < 0:
        raise ValueError("total must be >= 0")

    generated: list[tuple[str, str]] = []
    first_len = len(DEMO_FIRST_NAMES_CL)
    last_len = len(DEMO_LAST_NAMES_CL)

    for idx in range(total):
        first_name = DEMO_FIRST_NAMES_CL[(idx + offset) % first_len]
        last_name = (
            f"{DEMO_LAST_NAMES_CL[(idx + offset) % last_len]} "
            f"{DEMO_LAST_NAMES_CL[(idx + offset + 7) % last_len]}"
        )
        if is_generic_demo_name(first_name, last_name):
            raise ValueError(f"Generated generic demo name is not allowed: {first_name} {last_name}")
        generated.append((first_name, last_name))
    return generated
