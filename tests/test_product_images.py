"""
tests/test_product_images.py
Product thumbnail derivation from pasted retailer links.
"""

import pytest

from app.modules.gifts.product_images import derive_image_url, favicon_url, parse_hostname


@pytest.mark.parametrize("url, expected", [
    ("https://www.amazon.com/Some-Product/dp/B08N5WRWNW/ref=sr_1_1",
     "https://images-na.ssl-images-amazon.com/images/P/B08N5WRWNW.jpg"),
    ("https://www.amazon.de/gp/product/B07XJ8C8F5",
     "https://images-na.ssl-images-amazon.com/images/P/B07XJ8C8F5.jpg"),
    ("https://www.target.com/p/lego-set/-/A-81234567",
     "https://target.scene7.com/is/image/Target/81234567"),
    ("https://www.walmart.com/ip/123456789",
     "https://i5.walmartimages.com/asr/123456789.jpg"),
    ("https://www.bestbuy.com/site/headphones/6505727.p?skuId=6505727",
     "https://pisces.bbystatic.com/image2/BestBuy_US/images/products/6505/6505727_sd.jpg"),
])
def test_known_retailers(url, expected):
    assert derive_image_url(url) == expected


def test_unknown_site_falls_back_to_favicon():
    assert derive_image_url("https://shop.example.org/item/42") == \
        "https://www.google.com/s2/favicons?domain=shop.example.org&sz=128"


def test_etsy_falls_back_to_favicon():
    url = "https://www.etsy.com/listing/123456789/handmade-mug"
    assert derive_image_url(url) == favicon_url("www.etsy.com")


def test_retailer_without_product_id_falls_back_to_favicon():
    assert derive_image_url("https://www.amazon.com/gift-cards") == favicon_url("www.amazon.com")


@pytest.mark.parametrize("url", ["not a url", "ftp://files.example.com/x", "https://", "", None])
def test_unparseable_urls_yield_none(url):
    assert derive_image_url(url) is None


def test_parse_hostname():
    assert parse_hostname("  https://Example.com/path ") == "example.com"
    assert parse_hostname("example.com/path") is None
