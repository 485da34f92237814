"""blogdesk - block-based draft editor and Strapi client for a headless blog."""

__version__ = "0.1.0"
