"""GitHub push webhook that runs a deploy script and purges CloudFront."""

__version__ = "0.1.0"
