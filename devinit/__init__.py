"""Local development environment bootstrap for Warden-based Magento projects."""

__version__ = "0.4.0"
