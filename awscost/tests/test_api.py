"""
Tests for the HTTP API.
"""

import pytest

from awscost.api.dependencies import get_cost_estimator, get_recommendation_engine
from awscost.main import app
from awscost.pricing.aws_pricing_client import AWSPricingError
from awscost.pricing.base import PricingClient
from awscost.services.cost_estimator import CostEstimator
from awscost.services.recommendations import RecommendationEngine


class BrokenPricingClient(PricingClient):
    """Pricing client whose backend is down."""

    def lookup(self, service, sku, region, attributes=None):
        raise AWSPricingError('Failed to query AWS pricing: timeout')


def _ec2(**overrides):
    descriptor = {'resource_type': 'aws:ec2/instance:Instance', 'sku': 't3.micro', 'region': 'us-east-1'}
    descriptor.update(overrides)
    return descriptor


def test_health(client):
    """Health reports the configured region."""
    response = client.get('/health')

    assert response.status_code == 200
    assert response.json() == {'status': 'ok', 'region': 'us-east-1'}


def test_projected_cost(client):
    """Projected cost returns the estimate and a billing record."""
    response = client.post('/api/costs/projected', json=_ec2())

    assert response.status_code == 200
    data = response.json()
    assert data['estimate']['monthly_cost_usd'] == 7.592
    assert data['estimate']['kind'] == 'compute'
    assert data['estimate']['service'] == 'ec2'
    assert data['billing_record']['BilledCost'] == data['billing_record']['ListCost']
    assert data['billing_record']['ServiceCategory'] == 'compute'
    assert data['billing_record']['PricingUnit'] == 'Hours'


def test_projected_cost_reports_carbon(client):
    """Projected EC2 estimates include a carbon footprint metric."""
    response = client.post('/api/costs/projected', json=_ec2(tags={'utilization_percentage': '0.5'}))

    [metric] = response.json()['estimate']['impact_metrics']
    assert metric['kind'] == 'carbon_footprint'
    assert metric['unit'] == 'gCO2e'
    assert 600 < metric['value'] < 750


def test_pricing_spec(client):
    """The pricing spec reports mode, rate and unit without a cost."""
    response = client.post('/api/costs/pricing-spec', json=_ec2())

    assert response.status_code == 200
    spec = response.json()['spec']
    assert spec['billing_mode'] == 'per_hour'
    assert spec['rate_per_unit'] == 0.0104
    assert spec['unit'] == 'Hrs'
    assert 'monthly_cost_usd' not in spec


def test_pricing_spec_errors(client):
    """Spec requests map validation failures to HTTP status codes."""
    assert client.post('/api/costs/pricing-spec', json=_ec2(sku='')).status_code == 400
    assert client.post('/api/costs/pricing-spec', json=_ec2(region='eu-west-1')).status_code == 412
    assert client.post('/api/costs/pricing-spec', json=_ec2(sku='x9.huge')).status_code == 200

    app.dependency_overrides[get_cost_estimator] = lambda: CostEstimator(BrokenPricingClient(), region='us-east-1')
    assert client.post('/api/costs/pricing-spec', json=_ec2()).status_code == 503


def test_projected_cost_from_arn(client):
    """An ARN supplies service and region."""
    response = client.post('/api/costs/projected', json={
        'arn': 'arn:aws:ec2:us-east-1:123456789012:volume/vol-0abc',
        'sku': 'gp3',
        'tags': {'size': '10'},
    })

    assert response.status_code == 200
    estimate = response.json()['estimate']
    assert estimate['service'] == 'ebs'
    assert estimate['monthly_cost_usd'] == 0.8


def test_projected_cost_isolated_partition(client):
    """ARNs in isolated partitions are rejected."""
    response = client.post('/api/costs/projected', json={
        'arn': 'arn:aws-iso:ec2:us-iso-east-1:123456789012:instance/i-0abc',
        'sku': 't3.micro',
    })

    assert response.status_code == 400
    assert 'isolated partitions' in response.json()['detail']


def test_projected_cost_not_found(client):
    """Unknown SKUs return 404 with structured detail."""
    response = client.post('/api/costs/projected', json=_ec2(sku='x9.huge'))

    assert response.status_code == 404
    detail = response.json()['detail']
    assert detail['service'] == 'ec2'
    assert detail['sku'] == 'x9.huge'
    assert detail['region'] == 'us-east-1'
    assert detail['message'] == 'EC2 instance type "x9.huge" not found in pricing data'


def test_projected_cost_region_mismatch(client):
    """Other regions return 412 with both regions."""
    response = client.post('/api/costs/projected', json=_ec2(region='eu-west-1'))

    assert response.status_code == 412
    detail = response.json()['detail']
    assert detail['configured_region'] == 'us-east-1'
    assert detail['requested_region'] == 'eu-west-1'


def test_projected_cost_invalid_argument(client):
    """Missing SKU returns 400."""
    response = client.post('/api/costs/projected', json=_ec2(sku=''))

    assert response.status_code == 400


def test_projected_cost_pricing_outage(client):
    """Pricing backend failures return 503."""
    app.dependency_overrides[get_cost_estimator] = lambda: CostEstimator(BrokenPricingClient(), region='us-east-1')

    response = client.post('/api/costs/projected', json=_ec2())

    assert response.status_code == 503
    assert response.json()['detail'] == 'AWS pricing service unavailable'


def test_actual_cost(client):
    """Actual cost prorates the monthly estimate over the window."""
    response = client.post('/api/costs/actual', json={
        'resource': _ec2(),
        'start': '2024-01-01T00:00:00Z',
        'end': '2024-01-01T10:00:00Z',
    })

    assert response.status_code == 200
    data = response.json()
    assert data['runtime_hours'] == 10.0
    assert data['confidence'] == 'HIGH'
    assert data['source'] == 'aws-public-fallback[confidence:HIGH]'
    assert data['billing_record']['BilledCost'] == pytest.approx(data['cost_usd'], abs=1e-4)
    assert data['billing_record']['ChargePeriodStart'] == '2024-01-01T00:00:00+00:00'


def test_actual_cost_reversed_window(client):
    """End before start returns 400."""
    response = client.post('/api/costs/actual', json={
        'resource': _ec2(),
        'start': '2024-01-02T00:00:00Z',
        'end': '2024-01-01T00:00:00Z',
    })

    assert response.status_code == 400


def test_actual_cost_requires_start(client):
    """Without start or created tag the request is rejected."""
    response = client.post('/api/costs/actual', json={'resource': _ec2()})

    assert response.status_code == 400
    assert 'start time is required' in response.json()['detail']


def test_batch_reports_errors_inline(client):
    """Batch estimates keep order and report failures per resource."""
    response = client.post('/api/costs/batch', json={'resources': [
        _ec2(),
        _ec2(sku='x9.huge'),
        _ec2(region='eu-west-1'),
        {'resource_type': 'aws:ec2/vpc:Vpc', 'region': 'us-east-1'},
    ]})

    assert response.status_code == 200
    estimates = response.json()['estimates']
    assert [e['error'] for e in estimates] == [None, 'pricing_not_found', 'region_mismatch', None]
    assert estimates[3]['kind'] == 'zero_cost'
    assert estimates[3]['monthly_cost_usd'] == 0


def test_batch_keeps_going_past_unparseable_arn(client):
    """A bad ARN fails only its own item, at its own position."""
    response = client.post('/api/costs/batch', json={'resources': [
        _ec2(),
        {'arn': 'arn:aws-iso:ec2:us-iso-east-1:123456789012:instance/i-0abc', 'sku': 't3.micro'},
        _ec2(sku=''),
    ]})

    assert response.status_code == 200
    estimates = response.json()['estimates']
    assert [e['error'] for e in estimates] == [None, 'invalid_argument', 'invalid_argument']
    assert estimates[0]['monthly_cost_usd'] == 7.592
    assert 'isolated partitions' in estimates[1]['billing_detail']
    assert estimates[1]['monthly_cost_usd'] == 0


def test_batch_requires_resources(client):
    """The resources list is mandatory."""
    assert client.post('/api/costs/batch', json={}).status_code == 422


def test_supports(client):
    """Supports answers with a reason when pricing is impossible."""
    supported = client.post('/api/costs/supports', json=_ec2()).json()
    assert supported == {'supported': True, 'reason': ''}

    other_region = client.post('/api/costs/supports', json=_ec2(region='eu-west-1')).json()
    assert other_region['supported'] is False
    assert 'eu-west-1' in other_region['reason']


def test_recommendations(client):
    """Recommendations come with a summary."""
    response = client.post('/api/recommendations', json={'resources': [
        _ec2(sku='m5.large', id='i-1', tags={'name': 'web'}),
        {'resource_type': 'aws_ebs_volume', 'sku': 'gp2', 'region': 'us-east-1', 'tags': {'size': '100'}},
    ]})

    assert response.status_code == 200
    data = response.json()
    assert data['summary']['total_recommendations'] == 3
    assert data['summary']['count_by_modification_type']['volume_type_upgrade'] == 1
    first = data['recommendations'][0]
    assert first['resource']['resource_id'] == 'i-1'
    assert first['resource']['name'] == 'web'
    assert first['category'] == 'COST'
    assert first['action_type'] == 'MODIFY'


def test_recommendations_filter(client):
    """Only resources matching the filter are analyzed."""
    response = client.post('/api/recommendations', json={
        'resources': [
            _ec2(sku='m5.large', tags={'env': 'prod'}),
            _ec2(sku='t3.micro', tags={'env': 'dev'}),
        ],
        'filter': {'tags': {'env': 'dev'}},
    })

    assert response.status_code == 200
    recommendations = response.json()['recommendations']
    assert recommendations
    assert all(r['resource']['sku'] == 't3.micro' for r in recommendations)


def test_recommendations_pricing_outage(client):
    """Pricing backend failures return 503."""
    app.dependency_overrides[get_recommendation_engine] = lambda: RecommendationEngine(
        BrokenPricingClient(), region='us-east-1'
    )

    response = client.post('/api/recommendations', json={'resources': [_ec2(sku='m5.large')]})

    assert response.status_code == 503
