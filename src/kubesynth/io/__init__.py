"""Reading service models and writing manifests."""
