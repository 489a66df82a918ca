"""Instance metadata server emulating the EC2 and NoCloud datasources."""
from metaserver.version import VERSION

__version__ = VERSION
