"""Derive a product thumbnail URL from a pasted product link."""

import re
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlencode, urlsplit

from app.config.settings import settings

# (domain marker, regex against the full url, thumbnail template)
_PATTERNS: List[Tuple[str, re.Pattern, Callable[[str], str]]] = [
    ("amazon.", re.compile(r"/(?:dp|gp/product)/([A-Z0-9]{10})", re.I),
     lambda m: f"https://images-na.ssl-images-amazon.com/images/P/{m}.jpg"),
    ("amazon.", re.compile(r"/images/I/([A-Za-z0-9%._-]+\.(?:jpg|jpeg|png|gif))", re.I),
     lambda m: f"https://images-na.ssl-images-amazon.com/images/I/{m}"),
    ("walmart.", re.compile(r"/ip/([^/?#]+)"),
     lambda m: f"https://i5.walmartimages.com/asr/{m}.jpg"),
    ("walmart.", re.compile(r"/([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})", re.I),
     lambda m: f"https://i5.walmartimages.com/asr/{m}.jpg"),
    ("target.", re.compile(r"/A-(\d+)"),
     lambda m: f"https://target.scene7.com/is/image/Target/{m}"),
    ("bestbuy.", re.compile(r"/(\d{7}\.p)"),
     lambda m: f"https://pisces.bbystatic.com/image2/BestBuy_US/images/products/{m[:4]}/{m.replace('.p', '_sd.jpg')}"),
]


def parse_hostname(url: str) -> Optional[str]:
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except (AttributeError, ValueError):
        return None
    if parts.scheme not in ("http", "https") or not hostname:
        return None
    return hostname


def favicon_url(hostname: str) -> str:
    query = urlencode({"domain": hostname, "sz": settings.favicon_size})
    return f"{settings.favicon_service_url}?{query}"


def derive_image_url(url: Optional[str]) -> Optional[str]:
    """Known retailer thumbnail, else the site's favicon, else None for unparseable urls."""
    if not url:
        return None
    hostname = parse_hostname(url)
    if hostname is None:
        return None
    domain = hostname.lower()
    for marker, pattern, template in _PATTERNS:
        if marker not in domain:
            continue
        match = pattern.search(url)
        if match:
            return template(match.group(1))
    return favicon_url(hostname)
