"""
Carbon footprint estimation.

Follows the Cloud Carbon Footprint method. Energy comes from per-vCPU
wattage interpolated by utilization, or from storage power coefficients
scaled by replication. It is then multiplied by the data center PUE and the
regional grid emission factor. Unknown instance types and storage classes
yield None rather than an error, so carbon never blocks a cost estimate.
"""
import logging
from types import MappingProxyType
from typing import Dict, Mapping, NamedTuple, Optional

from awscost.services.instance_types import parse_instance_type


logger = logging.getLogger(__name__)


CARBON_FOOTPRINT = "carbon_footprint"
CARBON_UNIT = "gCO2e"

# Power Usage Effectiveness of AWS data centers
AWS_PUE = 1.135

# CPU utilization assumed when none is given
DEFAULT_UTILIZATION = 0.50

UTILIZATION_TAG = "utilization_percentage"

GRAMS_PER_METRIC_TON = 1_000_000

# Metric tons CO2e per kWh
GRID_EMISSION_FACTORS: Mapping[str, float] = MappingProxyType({
    "us-east-1": 0.000379,
    "us-east-2": 0.000411,
    "us-west-1": 0.000322,
    "us-west-2": 0.000322,
    "ca-central-1": 0.00012,
    "eu-west-1": 0.0002786,
    "eu-north-1": 0.0000088,
    "ap-southeast-1": 0.000408,
    "ap-southeast-2": 0.00079,
    "ap-northeast-1": 0.000506,
    "ap-south-1": 0.000708,
    "sa-east-1": 0.0000617,
})

# Global average, used for regions without a specific factor
DEFAULT_GRID_FACTOR = 0.00039278


class PowerProfile(NamedTuple):
    """Package watts per vCPU at idle and at 100% utilization."""
    min_watts: float
    max_watts: float


class StorageSpec(NamedTuple):
    technology: str  # "SSD" | "HDD"
    replication_factor: int
    power_coefficient: float  # Wh per TB-hour


FAMILY_POWER: Mapping[str, PowerProfile] = MappingProxyType({
    "t2": PowerProfile(0.71, 3.69),
    "t3": PowerProfile(0.47, 1.69),
    "t3a": PowerProfile(0.82, 2.55),
    "t4g": PowerProfile(0.47, 1.69),
    "m4": PowerProfile(0.71, 3.69),
    "m5": PowerProfile(0.65, 4.26),
    "m5a": PowerProfile(0.82, 2.55),
    "m6i": PowerProfile(0.64, 3.97),
    "m6a": PowerProfile(0.45, 2.02),
    "m6g": PowerProfile(0.47, 1.69),
    "m7i": PowerProfile(0.64, 3.97),
    "m7a": PowerProfile(0.45, 2.02),
    "m7g": PowerProfile(0.47, 1.69),
    "c4": PowerProfile(1.90, 6.01),
    "c5": PowerProfile(0.64, 3.97),
    "c5a": PowerProfile(0.47, 1.69),
    "c6i": PowerProfile(0.64, 3.97),
    "c6a": PowerProfile(0.45, 2.02),
    "c6g": PowerProfile(0.47, 1.69),
    "c7i": PowerProfile(0.64, 3.97),
    "c7g": PowerProfile(0.47, 1.69),
    "r4": PowerProfile(0.71, 3.69),
    "r5": PowerProfile(0.65, 4.26),
    "r5a": PowerProfile(0.82, 2.55),
    "r6i": PowerProfile(0.64, 3.97),
    "r6a": PowerProfile(0.45, 2.02),
    "r6g": PowerProfile(0.47, 1.69),
    "r7i": PowerProfile(0.64, 3.97),
    "r7g": PowerProfile(0.47, 1.69),
})

SIZE_VCPUS: Mapping[str, int] = MappingProxyType({
    "nano": 2,
    "micro": 2,
    "small": 2,
    "medium": 2,
    "large": 2,
    "xlarge": 4,
    "2xlarge": 8,
    "4xlarge": 16,
    "8xlarge": 32,
    "12xlarge": 48,
    "16xlarge": 64,
    "24xlarge": 96,
})

# Instance types whose vCPU count departs from SIZE_VCPUS
VCPU_OVERRIDES: Mapping[str, int] = MappingProxyType({
    "t2.nano": 1,
    "t2.micro": 1,
    "t2.small": 1,
    "m6g.medium": 1,
    "c6g.medium": 1,
    "r6g.medium": 1,
    "m7g.medium": 1,
    "c7g.medium": 1,
    "r7g.medium": 1,
})

SSD_POWER_COEFFICIENT = 1.2
HDD_POWER_COEFFICIENT = 0.65

EBS_STORAGE_SPECS: Mapping[str, StorageSpec] = MappingProxyType({
    "gp2": StorageSpec("SSD", 2, SSD_POWER_COEFFICIENT),
    "gp3": StorageSpec("SSD", 2, SSD_POWER_COEFFICIENT),
    "io1": StorageSpec("SSD", 2, SSD_POWER_COEFFICIENT),
    "io2": StorageSpec("SSD", 2, SSD_POWER_COEFFICIENT),
    "st1": StorageSpec("HDD", 2, HDD_POWER_COEFFICIENT),
    "sc1": StorageSpec("HDD", 2, HDD_POWER_COEFFICIENT),
    "standard": StorageSpec("HDD", 2, HDD_POWER_COEFFICIENT),
})

S3_STORAGE_SPECS: Mapping[str, StorageSpec] = MappingProxyType({
    "STANDARD": StorageSpec("SSD", 3, SSD_POWER_COEFFICIENT),
    "INTELLIGENT_TIERING": StorageSpec("SSD", 3, SSD_POWER_COEFFICIENT),
    "STANDARD_IA": StorageSpec("SSD", 3, SSD_POWER_COEFFICIENT),
    "ONEZONE_IA": StorageSpec("SSD", 1, SSD_POWER_COEFFICIENT),
    "GLACIER_IR": StorageSpec("HDD", 3, HDD_POWER_COEFFICIENT),
    "GLACIER": StorageSpec("HDD", 3, HDD_POWER_COEFFICIENT),
    "DEEP_ARCHIVE": StorageSpec("HDD", 3, HDD_POWER_COEFFICIENT),
})


def get_grid_factor(region: str) -> float:
    return GRID_EMISSION_FACTORS.get(region, DEFAULT_GRID_FACTOR)


def get_vcpu_count(instance_type: str) -> Optional[int]:
    if instance_type in VCPU_OVERRIDES:
        return VCPU_OVERRIDES[instance_type]
    _, size = parse_instance_type(instance_type)
    return SIZE_VCPUS.get(size)


def resolve_utilization(tags: Dict[str, str]) -> float:
    """
    CPU utilization (0.0 to 1.0) from the utilization tag.

    Non-positive or unparseable values fall back to DEFAULT_UTILIZATION;
    values above 1.0 are clamped.
    """
    raw = tags.get(UTILIZATION_TAG)
    if not raw:
        return DEFAULT_UTILIZATION
    try:
        value = float(raw)
    except ValueError:
        logger.debug("Ignoring invalid %s tag: %r", UTILIZATION_TAG, raw)
        return DEFAULT_UTILIZATION
    if value <= 0:
        return DEFAULT_UTILIZATION
    return min(value, 1.0)


def _grams_from_kwh(energy_kwh: float, region: str) -> float:
    return energy_kwh * AWS_PUE * get_grid_factor(region) * GRAMS_PER_METRIC_TON


def estimate_instance_carbon(instance_type: str, region: str, utilization: float, hours: float) -> Optional[float]:
    """
    Carbon emitted by an EC2 instance over the given hours.

    Average watts per vCPU are interpolated linearly between idle and full
    load, multiplied by the vCPU count and converted to kWh.

    Returns:
        Grams of CO2e, or None when the instance type has no power data
    """
    family, _ = parse_instance_type(instance_type)
    profile = FAMILY_POWER.get(family)
    vcpus = get_vcpu_count(instance_type)
    if profile is None or vcpus is None:
        logger.debug("Carbon estimation skipped - no power data for %s", instance_type)
        return None

    average_watts = profile.min_watts + utilization * (profile.max_watts - profile.min_watts)
    energy_kwh = average_watts * vcpus * hours / 1000.0
    return _grams_from_kwh(energy_kwh, region)


def _estimate_storage_carbon(spec: Optional[StorageSpec], size_gb: float, region: str, hours: float) -> Optional[float]:
    if spec is None or size_gb < 0 or hours < 0:
        return None
    size_tb = size_gb / 1024.0
    energy_kwh = size_tb * hours * spec.power_coefficient * spec.replication_factor / 1000.0
    return _grams_from_kwh(energy_kwh, region)


def estimate_ebs_carbon(volume_type: str, size_gb: float, region: str, hours: float) -> Optional[float]:
    """Carbon for an EBS volume; None for unknown volume types."""
    return _estimate_storage_carbon(EBS_STORAGE_SPECS.get(volume_type.lower()), size_gb, region, hours)


def estimate_s3_carbon(storage_class: str, size_gb: float, region: str, hours: float) -> Optional[float]:
    """Carbon for S3 storage; None for unknown storage classes."""
    return _estimate_storage_carbon(S3_STORAGE_SPECS.get(storage_class.upper()), size_gb, region, hours)
