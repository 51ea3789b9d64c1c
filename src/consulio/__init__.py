"""consul-io - Import and export configuration files to/from a Consul KV store."""

__version__ = "1.0.9"
