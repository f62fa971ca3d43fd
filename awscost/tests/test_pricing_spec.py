"""
Tests for pricing specifications.
"""

import pytest

from awscost.domain.errors import InvalidArgumentError, RegionMismatchError
from awscost.services.cost_estimator import CostEstimator
from awscost.services.pricing_spec import PricingSpecService


@pytest.fixture
def specs(estimator):
    """Pricing spec service over the static rate card."""
    return PricingSpecService(estimator)


def test_ec2_spec(specs, make_resource):
    """EC2 is billed per hour at the on-demand rate."""
    spec = specs.describe(make_resource('aws:ec2/instance:Instance', sku='t3.micro'))

    assert spec.billing_mode == 'per_hour'
    assert spec.rate_per_unit == 0.0104
    assert spec.unit == 'Hrs'
    assert spec.currency == 'USD'
    assert spec.source == 'aws-public'
    assert spec.description == 'On-demand Linux EC2 instance with Shared tenancy'
    assert 'Tenancy: Shared' in spec.assumptions


def test_spec_rate_matches_estimate(specs, estimator, make_resource):
    """A spec and an estimate agree on the unit price."""
    resource = make_resource('aws_instance', sku='m5.large', tags={'platform': 'windows'})

    assert specs.describe(resource).rate_per_unit == estimator.estimate(resource).unit_price


def test_ec2_unknown_instance_type(specs, make_resource):
    """A missing rate is described, not raised."""
    spec = specs.describe(make_resource('aws:ec2/instance:Instance', sku='x9.huge'))

    assert spec.rate_per_unit == 0
    assert spec.description == 'EC2 instance type "x9.huge" not found in pricing data'
    assert spec.unit == 'Hours'


def test_storage_specs(specs, make_resource):
    ebs = specs.describe(make_resource('aws_ebs_volume', sku='gp3'))
    s3 = specs.describe(make_resource('aws:s3/bucket:Bucket', region=''))

    assert (ebs.billing_mode, ebs.rate_per_unit, ebs.unit) == ('per_gb_month', 0.08, 'GB-Mo')
    assert s3.billing_mode == 'per_gb_month'
    assert s3.sku == 'STANDARD'
    assert s3.region == 'us-east-1'


def test_lambda_spec_uses_gb_second_rate(specs, make_resource):
    spec = specs.describe(make_resource('aws:lambda/function:Function', tags={'arch': 'arm64'}))

    assert spec.billing_mode == 'per_request_and_gb_second'
    assert spec.sku == 'arm64'
    assert spec.rate_per_unit == 0.0000133334
    assert spec.assumptions[0] == 'Request rate: $0.0000002000 per request'


@pytest.mark.parametrize('sku, mode, rate', [
    ('', 'on_demand', 0.25),
    ('provisioned', 'provisioned_capacity', 0.00013),
])
def test_dynamodb_modes(specs, make_resource, sku, mode, rate):
    spec = specs.describe(make_resource('aws:dynamodb/table:Table', sku=sku))

    assert spec.billing_mode == mode
    assert spec.rate_per_unit == rate


@pytest.mark.parametrize('resource_type, sku, mode, rate', [
    ('aws:eks/cluster:Cluster', '', 'per_hour', 0.10),
    ('aws:lb/loadBalancer:LoadBalancer', '', 'per_hour_plus_lcu', 0.0225),
    ('aws:lb/loadBalancer:LoadBalancer', 'network', 'per_hour_plus_nlcu', 0.0225),
    ('aws:ec2/natGateway:NatGateway', '', 'per_hour_plus_data', 0.045),
    ('aws:cloudwatch/logGroup:LogGroup', '', 'ingestion_plus_storage', 0.50),
    ('aws:cloudwatch/metricAlarm:MetricAlarm', 'metrics', 'per_metric', 0.30),
])
def test_component_priced_services(specs, make_resource, resource_type, sku, mode, rate):
    """Multi-component services report their primary rate."""
    spec = specs.describe(make_resource(resource_type, sku=sku))

    assert spec.billing_mode == mode
    assert spec.rate_per_unit == rate


def test_missing_component_rates(fake_pricing, make_resource):
    """Any missing component leaves the rate at zero."""
    fake_pricing.prices[('natgw', 'hourly')] = 0.045
    spec = PricingSpecService(CostEstimator(fake_pricing, region='us-east-1')).describe(
        make_resource('aws_nat_gateway')
    )

    assert spec.rate_per_unit == 0
    assert spec.description == 'NAT Gateway pricing not found'


def test_zero_cost_and_unknown_types(specs, make_resource):
    assert specs.describe(make_resource('aws:ec2/vpc:Vpc')).billing_mode == 'free'

    unknown = specs.describe(make_resource('aws:foo/bar:Baz'))
    assert unknown.billing_mode == 'unknown'
    assert unknown.description == 'Resource type "aws:foo/bar:Baz" not supported for pricing specification'


def test_spec_validates_like_estimates(specs, make_resource):
    """Spec requests go through the same validation and region gate."""
    with pytest.raises(InvalidArgumentError):
        specs.describe(make_resource('aws:ec2/instance:Instance'))
    with pytest.raises(RegionMismatchError):
        specs.describe(make_resource('aws:ec2/instance:Instance', sku='t3.micro', region='eu-west-1'))


def test_spec_serialization(specs, make_resource):
    data = specs.describe(make_resource('aws_ebs_volume', sku='gp2')).to_dict()

    assert data['billing_mode'] == 'per_gb_month'
    assert data['rate_per_unit'] == 0.10
    assert data['assumptions'] == ['Storage only (IOPS/throughput not included)', 'Standard provisioned capacity']
