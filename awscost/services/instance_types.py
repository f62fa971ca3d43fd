"""
Instance type analysis for EC2 and RDS.

Splits instance types into family and size, and looks up newer-generation and
Graviton (ARM) equivalents. All lookups are single-hop reads of static tables.
"""
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


RDS_PREFIX = "db."

# Newer generation with equal or better price/performance
GENERATION_UPGRADES: Mapping[str, str] = MappingProxyType({
    "t2": "t3",
    "t3": "t3a",
    "m4": "m5",
    "m5": "m6i",
    "m5a": "m6a",
    "m6i": "m7i",
    "m6a": "m7a",
    "c4": "c5",
    "c5": "c6i",
    "c5a": "c6a",
    "c6i": "c7i",
    "c6a": "c7a",
    "r4": "r5",
    "r5": "r6i",
    "r5a": "r6a",
    "r6i": "r7i",
    "r6a": "r7a",
    "i3": "i3en",
    "d2": "d3",
})

# x86 family -> Graviton family, roughly 20% cheaper at comparable performance
GRAVITON_EQUIVALENTS: Mapping[str, str] = MappingProxyType({
    "m5": "m6g",
    "m5a": "m6g",
    "m5n": "m6g",
    "m6i": "m6g",
    "m6a": "m6g",
    "m7i": "m7g",
    "m7a": "m7g",
    "c5": "c6g",
    "c5a": "c6g",
    "c5n": "c6gn",
    "c6i": "c6g",
    "c6a": "c6g",
    "c7i": "c7g",
    "c7a": "c7g",
    "r5": "r6g",
    "r5a": "r6g",
    "r5n": "r6g",
    "r6i": "r6g",
    "r6a": "r6g",
    "r7i": "r7g",
    "r7a": "r7g",
    "t3": "t4g",
    "t3a": "t4g",
})

RDS_GENERATION_UPGRADES: Mapping[str, str] = MappingProxyType({
    "db.t2": "db.t3",
    "db.t3": "db.t4g",
    "db.m4": "db.m5",
    "db.m5": "db.m6i",
    "db.m6i": "db.m7i",
    "db.r4": "db.r5",
    "db.r5": "db.r6i",
    "db.r6i": "db.r7i",
})

RDS_GRAVITON_EQUIVALENTS: Mapping[str, str] = MappingProxyType({
    "db.m5": "db.m6g",
    "db.m6i": "db.m7g",
    "db.r5": "db.r6g",
    "db.r6i": "db.r7g",
    "db.t3": "db.t4g",
})

# Engines with Graviton support on RDS. Oracle and SQL Server are excluded.
GRAVITON_COMPATIBLE_ENGINES = frozenset({
    "mysql",
    "postgres",
    "postgresql",
    "mariadb",
    "aurora",
    "aurora-mysql",
    "aurora-postgresql",
})


def parse_instance_type(instance_type: str) -> Tuple[str, str]:
    """
    Split an instance type into family and size.

    Args:
        instance_type: e.g. 't3.medium'

    Returns:
        Tuple of (family, size), or ("", "") if either part is missing
    """
    parts = instance_type.split(".", 1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return "", ""
    return parts[0], parts[1]


def parse_rds_instance_type(instance_type: str) -> Tuple[str, str]:
    """
    Split an RDS instance class into family and size.

    'db.m5.large' -> ('db.m5', 'large'). Input without the 'db.' prefix
    yields ("", "").
    """
    if not instance_type.startswith(RDS_PREFIX):
        return "", ""
    family, size = parse_instance_type(instance_type[len(RDS_PREFIX):])
    if not family:
        return "", ""
    return RDS_PREFIX + family, size


def get_generation_upgrade(family: str) -> Optional[str]:
    return GENERATION_UPGRADES.get(family)


def get_graviton_family(family: str) -> Optional[str]:
    return GRAVITON_EQUIVALENTS.get(family)


def get_rds_generation_upgrade(family: str) -> Optional[str]:
    return RDS_GENERATION_UPGRADES.get(family)


def get_rds_graviton_family(family: str, engine: Optional[str] = None) -> Optional[str]:
    """
    Graviton family for an RDS family.

    When engine is given, the suggestion is suppressed for engines without
    Graviton support, even if a mapping exists.
    """
    if engine is not None and not is_graviton_compatible_engine(engine):
        return None
    return RDS_GRAVITON_EQUIVALENTS.get(family)


def is_graviton_compatible_engine(engine: str) -> bool:
    return engine.lower() in GRAVITON_COMPATIBLE_ENGINES
