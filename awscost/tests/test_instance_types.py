"""
Tests for instance type parsing and upgrade lookups.
"""

import pytest

from awscost.services.instance_types import (
    get_generation_upgrade,
    get_graviton_family,
    get_rds_generation_upgrade,
    get_rds_graviton_family,
    is_graviton_compatible_engine,
    parse_instance_type,
    parse_rds_instance_type,
)


@pytest.mark.parametrize('instance_type, expected', [
    ('t3.medium', ('t3', 'medium')),
    ('m5.2xlarge', ('m5', '2xlarge')),
    ('c6gn.16xlarge', ('c6gn', '16xlarge')),
    ('t3', ('', '')),
    ('t3.', ('', '')),
    ('.large', ('', '')),
    ('', ('', '')),
])
def test_parse_instance_type(instance_type, expected):
    """Family and size must both be non-empty."""
    assert parse_instance_type(instance_type) == expected


@pytest.mark.parametrize('instance_type, expected', [
    ('db.m5.large', ('db.m5', 'large')),
    ('db.t3.micro', ('db.t3', 'micro')),
    ('m5.large', ('', '')),
    ('db.m5', ('', '')),
    ('db.', ('', '')),
])
def test_parse_rds_instance_type(instance_type, expected):
    """RDS classes keep the db. prefix on the family."""
    assert parse_rds_instance_type(instance_type) == expected


def test_generation_upgrade_is_single_hop():
    """Each lookup moves one generation; callers may walk further."""
    assert get_generation_upgrade('m4') == 'm5'
    assert get_generation_upgrade(get_generation_upgrade('m4')) == 'm6i'
    assert get_generation_upgrade('t2') == 't3'


def test_latest_generation_has_no_upgrade():
    """No mapping means already on the latest known generation."""
    assert get_generation_upgrade('m7i') is None
    assert get_generation_upgrade('unknown') is None


def test_graviton_equivalents():
    """x86 families map to their ARM equivalents."""
    assert get_graviton_family('m5') == 'm6g'
    assert get_graviton_family('c7i') == 'c7g'
    assert get_graviton_family('t3') == 't4g'
    assert get_graviton_family('m6g') is None


def test_rds_generation_upgrade():
    """RDS families have their own upgrade table."""
    assert get_rds_generation_upgrade('db.m5') == 'db.m6i'
    assert get_rds_generation_upgrade('db.m7g') is None


@pytest.mark.parametrize('engine', ['mysql', 'PostgreSQL', 'postgres', 'mariadb', 'aurora-mysql'])
def test_open_source_engines_get_graviton(engine):
    """Engines with ARM support receive Graviton suggestions."""
    assert is_graviton_compatible_engine(engine)
    assert get_rds_graviton_family('db.m5', engine) == 'db.m6g'


@pytest.mark.parametrize('engine', ['oracle', 'sqlserver', 'sql-server', 'oracle-se2'])
def test_proprietary_engines_never_get_graviton(engine):
    """Proprietary engines are filtered even though a family mapping exists."""
    assert not is_graviton_compatible_engine(engine)
    assert get_rds_graviton_family('db.m5', engine) is None


def test_rds_graviton_without_engine_uses_family_table():
    """Without an engine only the family table is consulted."""
    assert get_rds_graviton_family('db.r5') == 'db.r6g'
    assert get_rds_graviton_family('db.x1') is None
