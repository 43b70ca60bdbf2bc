"""Build, smoke-test and publish the Tika server container images."""

__version__ = "0.3.0"
