"""ShonenX anime metadata aggregation core."""

__version__ = "0.1.0"
