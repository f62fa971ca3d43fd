"""
Offer file sync.
Downloads AWS Price List Bulk API offer files into the local pricing cache
read by AWSBulkPricingClient.
"""
import argparse
import asyncio
import gzip
import logging
from pathlib import Path
from typing import List, Sequence

import httpx

from awscost.pricing.aws_region_map import is_known_region


logger = logging.getLogger(__name__)

AWS_PRICING_API = "https://pricing.us-east-1.amazonaws.com"

DEFAULT_SERVICE_CODES = ("AmazonEC2", "AmazonRDS", "AmazonElastiCache")


class OfferSyncError(Exception):
    """Raised when an offer file cannot be downloaded or stored."""
    pass


def offer_file_url(service_code: str, region: str) -> str:
    return f"{AWS_PRICING_API}/offers/v1.0/aws/{service_code}/current/{region}/index.json"


async def download_offer_file(
    service_code: str,
    region: str,
    cache_dir: str,
    client: httpx.AsyncClient,
) -> Path:
    """
    Download one regional offer file and store it gzipped.

    Args:
        service_code: AWS service code (e.g., 'AmazonEC2')
        region: AWS region code
        cache_dir: Pricing cache root
        client: Shared HTTP client

    Returns:
        Path of the written <cache_dir>/<service_code>/<region>.json.gz

    Raises:
        OfferSyncError: If the region is unknown or the download fails
    """
    if not is_known_region(region):
        raise OfferSyncError(f"Unknown AWS region: {region}")

    url = offer_file_url(service_code, region)
    try:
        response = await client.get(url, timeout=300.0)
        response.raise_for_status()
    except httpx.HTTPError as error:
        raise OfferSyncError(f"Failed to download {url}: {error}") from error

    target = Path(cache_dir) / service_code / f"{region}.json.gz"
    target.parent.mkdir(parents=True, exist_ok=True)
    with gzip.open(target, "wb") as f:
        f.write(response.content)
    logger.info("Stored %s offer for %s (%d bytes)", service_code, region, len(response.content))
    return target


async def sync_offer_files(
    service_codes: Sequence[str],
    regions: Sequence[str],
    cache_dir: str,
) -> List[Path]:
    """Download every service/region combination. Stops at the first failure."""
    written = []
    async with httpx.AsyncClient(follow_redirects=True) as client:
        for service_code in service_codes:
            for region in regions:
                written.append(await download_offer_file(service_code, region, cache_dir, client))
    return written


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Download AWS offer files for offline pricing")
    parser.add_argument("--out", default="pricing-cache/aws", help="Pricing cache directory")
    parser.add_argument("--services", default=",".join(DEFAULT_SERVICE_CODES),
                        help="Comma-separated AWS service codes")
    parser.add_argument("--regions", default="us-east-1", help="Comma-separated region codes")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    services = [s.strip() for s in args.services.split(",") if s.strip()]
    regions = [r.strip() for r in args.regions.split(",") if r.strip()]
    try:
        asyncio.run(sync_offer_files(services, regions, args.out))
    except OfferSyncError as error:
        logger.error("%s", error)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
