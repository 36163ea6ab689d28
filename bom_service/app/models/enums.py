from enum import Enum


class PartStatus(str, Enum):
    CONCEPT = "concept"
    ACTIVE = "active"
    OBSOLETE = "obsolete"
    ARCHIVED = "archived"


class LifecycleStatus(str, Enum):
    DRAFT = "draft"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    PRE_RELEASE = "pre-release"
    RELEASED = "released"
    PRODUCTION = "production"
    ON_HOLD = "on_hold"
    OBSOLETE = "obsolete"
    ARCHIVED = "archived"


class WeightUnit(str, Enum):
    MG = "mg"
    G = "g"
    KG = "kg"
    LB = "lb"
    OZ = "oz"


class DimensionUnit(str, Enum):
    MM = "mm"
    CM = "cm"
    M = "m"
    IN = "in"
    FT = "ft"


class TemperatureUnit(str, Enum):
    C = "C"
    F = "F"
    K = "K"


class PackageType(str, Enum):
    SMD = "SMD"
    THT = "THT"
    QFP = "QFP"
    BGA = "BGA"
    DIP = "DIP"
    SOT23 = "SOT-23"
    TO220 = "TO-220"
    SOP = "SOP"
    TSSOP = "TSSOP"
    LQFP = "LQFP"
    DFN = "DFN"
    QFN = "QFN"
    DO35 = "DO-35"
    DO41 = "DO-41"
    SOD = "SOD"
    SC70 = "SC-70"
    FCBGA = "FCBGA"


class MountingType(str, Enum):
    SMT = "SMT"
    THT = "THT"
    MANUAL = "Manual"
    PRESS_FIT = "Press-fit"
    THROUGH_GLASS = "Through-glass"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    ON_HOLD = "on_hold"


class CustomFieldDataType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"


class CustomFieldTarget(str, Enum):
    CATEGORY = "category"
    MANUFACTURER = "manufacturer"
    SUPPLIER = "supplier"


# A released version is frozen; edits go into a new version.
FROZEN_LIFECYCLE_STATUSES = frozenset({LifecycleStatus.RELEASED.value})
