"""Client side of consul-io: store clients, sync pipeline and CLI."""
