from __future__ import annotations

import unicodedata
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Type, TypeVar

from .exceptions import ValidationError


class Role(str, Enum):
    """Caller role used by the default access policy."""

    ADMINISTRATOR = "ADMINISTRATOR"
    MANAGER = "MANAGER"
    USER = "USER"


class TimeEntryStatus(str, Enum):
    """Lifecycle state of one day's time entry."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    INCOMPLETE = "INCOMPLETE"
    ABSENT = "ABSENT"


class ApprovalStatus(str, Enum):
    """Approval flow shared by absences, overtime and special hours."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AbsenceType(str, Enum):
    VACATION = "VACATION"
    SICK_LEAVE = "SICK_LEAVE"
    PERSONAL = "PERSONAL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    UNPAID = "UNPAID"
    OTHER = "OTHER"


class SpecialHourType(str, Enum):
    HOLIDAY = "HOLIDAY"
    NIGHT_SHIFT = "NIGHT_SHIFT"
    WEEKEND = "WEEKEND"
    ON_CALL = "ON_CALL"


class RangeType(str, Enum):
    NORMAL = "NORMAL"
    OVERTIME = "OVERTIME"
    NIGHT_SHIFT = "NIGHT_SHIFT"
    SUNDAY = "SUNDAY"
    HOLIDAY = "HOLIDAY"
    SPECIAL = "SPECIAL"


class PeriodType(str, Enum):
    REGULAR = "REGULAR"
    BREAK = "BREAK"
    OVERTIME = "OVERTIME"
    SPECIAL = "SPECIAL"


class ScheduleType(str, Enum):
    FIXED = "FIXED"
    FLEXIBLE = "FLEXIBLE"
    SHIFT = "SHIFT"


class CycleType(str, Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    CUSTOM = "CUSTOM"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class OverallStatus(str, Enum):
    VALID = "VALID"
    WARNING = "WARNING"
    INVALID = "INVALID"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"


class EmployeeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"


class ContractType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    TEMPORARY = "TEMPORARY"
    CONTRACT = "CONTRACT"


# Second (French) vocabulary accepted at the boundaries. Keys are already in
# folded form (see _fold); values are canonical member names.
_ALIASES: Mapping[type, Mapping[str, str]] = MappingProxyType(
    {
        Role: MappingProxyType(
            {
                "ADMINISTRATEUR": "ADMINISTRATOR",
                "ADMIN": "ADMINISTRATOR",
                "GESTIONNAIRE": "MANAGER",
                "UTILISATEUR": "USER",
            }
        ),
        TimeEntryStatus: MappingProxyType(
            {
                "EN_ATTENTE": "PENDING",
                "TERMINE": "COMPLETED",
                "INCOMPLET": "INCOMPLETE",
            }
        ),
        ApprovalStatus: MappingProxyType(
            {
                "EN_ATTENTE": "PENDING",
                "APPROUVE": "APPROVED",
                "REJETE": "REJECTED",
            }
        ),
        AbsenceType: MappingProxyType(
            {
                "CONGES": "VACATION",
                "CONGE_MALADIE": "SICK_LEAVE",
                "MALADIE": "SICK_LEAVE",
                "PERSONNEL": "PERSONAL",
                "MATERNITE": "MATERNITY",
                "PATERNITE": "PATERNITY",
                "SANS_SOLDE": "UNPAID",
                "AUTRE": "OTHER",
            }
        ),
        SpecialHourType: MappingProxyType(
            {
                "FERIE": "HOLIDAY",
                "NUIT": "NIGHT_SHIFT",
                "FIN_DE_SEMAINE": "WEEKEND",
                "ASTREINTE": "ON_CALL",
            }
        ),
        RangeType: MappingProxyType(
            {
                "HEURE_SUPPLEMENTAIRE": "OVERTIME",
                "HEURES_SUPPLEMENTAIRES": "OVERTIME",
                "NUIT": "NIGHT_SHIFT",
                "DIMANCHE": "SUNDAY",
                "FERIE": "HOLIDAY",
                "SPECIALE": "SPECIAL",
                "HEURE_SPECIALE": "SPECIAL",
            }
        ),
        PeriodType: MappingProxyType(
            {
                "REGULIER": "REGULAR",
                "NORMAL": "REGULAR",
                "PAUSE": "BREAK",
                "HEURE_SUPPLEMENTAIRE": "OVERTIME",
                "HEURE_SPECIALE": "SPECIAL",
            }
        ),
        ScheduleType: MappingProxyType(
            {
                "FIXE": "FIXED",
                "FLEXIBLE": "FLEXIBLE",
                "EQUIPE": "SHIFT",
            }
        ),
        CycleType: MappingProxyType(
            {
                "HEBDOMADAIRE": "WEEKLY",
                "BIHEBDOMADAIRE": "BIWEEKLY",
                "MENSUEL": "MONTHLY",
                "PERSONNALISE": "CUSTOM",
            }
        ),
        Severity: MappingProxyType(
            {
                "FAIBLE": "LOW",
                "MOYENNE": "MEDIUM",
                "ELEVEE": "HIGH",
                "CRITIQUE": "CRITICAL",
            }
        ),
        OverallStatus: MappingProxyType(
            {
                "VALIDE": "VALID",
                "AVERTISSEMENT": "WARNING",
                "INVALIDE": "INVALID",
            }
        ),
        Gender: MappingProxyType(
            {
                "HOMME": "MALE",
                "FEMME": "FEMALE",
                "INCONNU": "UNKNOWN",
            }
        ),
        EmployeeStatus: MappingProxyType(
            {
                "ACTIF": "ACTIVE",
                "INACTIF": "INACTIVE",
                "SUSPENDU": "SUSPENDED",
                "RESILIE": "TERMINATED",
            }
        ),
        ContractType: MappingProxyType(
            {
                "TEMPS_PLEIN": "FULL_TIME",
                "TEMPS_PARTIEL": "PART_TIME",
                "INTERIM": "TEMPORARY",
                "CONTRAT": "CONTRACT",
            }
        ),
    }
)

E = TypeVar("E", bound=Enum)


def _fold(value: str) -> str:
    text = unicodedata.normalize("NFKD", value.strip())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.casefold().upper().replace("-", "_").replace(" ", "_")


def normalize_enum(enum_cls: Type[E], value: object) -> E:
    """Map any accepted spelling of an enum value to its canonical member.

    Accepts a member of ``enum_cls`` (returned as-is), the canonical name in
    any case, or an alias from the second vocabulary ("EN_ATTENTE",
    "Approuvé", "férié", ...).
    """

    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{enum_cls.__name__}: invalid value {value!r}")

    key = _fold(value)
    if key in enum_cls.__members__:
        return enum_cls[key]

    canonical = _ALIASES.get(enum_cls, {}).get(key)
    if canonical is None:
        raise ValidationError(f"{enum_cls.__name__}: unknown value {value!r}")
    return enum_cls[canonical]


def same_value(enum_cls: Type[E], left: object, right: object) -> bool:
    """Compare two spellings by their canonical form."""

    return normalize_enum(enum_cls, left) is normalize_enum(enum_cls, right)
