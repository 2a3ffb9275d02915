"""ShopScope: back-office list views for an e-commerce admin API."""

__version__ = "0.1.0"
