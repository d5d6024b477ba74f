"""Service layer: store adapter, gateway client, order and webhook processing."""
