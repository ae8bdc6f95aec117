"""Order fulfillment engine for vehicle fleet orders."""
